"""
rgh configuration.

The RunConfig loads an optional YAML file with API and polling settings and
knows how to find an API token. Nothing in it is required: with no file at
all, rgh talks to api.github.com with the default polling policy.

Example config:

    api_url: https://api.github.com
    timeout: 30
    polling:
      max_attempts: 5
      initial_backoff: 1.0
      backoff_factor: 2.0
"""

import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import ConfigError
from ..gh.client import DEFAULT_API_URL
from ..gh.models import CorrelationPolicy

CONFIG_ENV_VAR = 'RGH_CONFIG'
DEFAULT_CONFIG_PATH = Path.home() / '.config' / 'rgh' / 'config.yaml'
TOKEN_ENV_VARS = ('GH_TOKEN', 'GITHUB_TOKEN')

KNOWN_SECTIONS = {'api_url', 'timeout', 'token', 'polling'}
KNOWN_POLLING_KEYS = {'max_attempts', 'initial_backoff', 'backoff_factor'}


class RunConfig:
    """
    Loads and validates the rgh config.

    Example:
        config = RunConfig.load()
        print(config.api_url)
        print(config.policy)
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = data or {}
        self._validate()

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'RunConfig':
        """Load config from YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config not found: {path}")

        with open(path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping: {path}")
        return cls(data)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> 'RunConfig':
        """
        Load config from the first available location.

        Order: explicit path, $RGH_CONFIG, ~/.config/rgh/config.yaml.
        An explicit or environment path must exist; the default path is
        optional.
        """
        if path:
            return cls.from_yaml(path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return cls.from_yaml(env_path)
        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)
        return cls()

    def _validate(self):
        """Reject unknown keys and malformed polling values."""
        unknown = set(self._data) - KNOWN_SECTIONS
        if unknown:
            raise ConfigError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

        polling = self._data.get('polling') or {}
        if not isinstance(polling, dict):
            raise ConfigError("'polling' must be a mapping")
        unknown = set(polling) - KNOWN_POLLING_KEYS
        if unknown:
            raise ConfigError(f"Unknown polling key(s): {', '.join(sorted(unknown))}")

        policy = self.policy
        if policy.max_attempts < 0:
            raise ConfigError("polling.max_attempts must be >= 0")
        if policy.initial_backoff < 0:
            raise ConfigError("polling.initial_backoff must be >= 0")
        if policy.backoff_factor < 1:
            raise ConfigError("polling.backoff_factor must be >= 1")
        if self.timeout <= 0:
            raise ConfigError("timeout must be > 0")

    # --- Properties ---

    @property
    def api_url(self) -> str:
        return self._data.get('api_url') or DEFAULT_API_URL

    @property
    def timeout(self) -> float:
        try:
            return float(self._data.get('timeout', 30))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid timeout: {e}") from e

    @property
    def policy(self) -> CorrelationPolicy:
        polling = self._data.get('polling') or {}
        defaults = CorrelationPolicy()
        try:
            return CorrelationPolicy(
                max_attempts=int(polling.get('max_attempts', defaults.max_attempts)),
                initial_backoff=float(polling.get('initial_backoff', defaults.initial_backoff)),
                backoff_factor=float(polling.get('backoff_factor', defaults.backoff_factor)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid polling value: {e}") from e

    def get_token(self) -> str:
        """
        API token for the GitHub REST API.

        Looks at $GH_TOKEN, $GITHUB_TOKEN, the config file, then asks the gh
        CLI (`gh auth token`).

        Raises:
            ConfigError: If no token is found
        """
        for var in TOKEN_ENV_VARS:
            token = os.environ.get(var)
            if token:
                return token

        if self._data.get('token'):
            return str(self._data['token'])

        try:
            result = subprocess.run(
                ['gh', 'auth', 'token'],
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            result = None
        if result is not None and result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()

        raise ConfigError(
            "No GitHub token found: set GH_TOKEN or GITHUB_TOKEN, or run 'gh auth login'"
        )
