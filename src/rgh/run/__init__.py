"""Run definition, configuration, orchestration and reporting."""

from .config import RunConfig
from .spec import RunOptions, RunSpec, build_run_spec
from .orchestrator import DispatchOrchestrator

__all__ = ['RunConfig', 'RunOptions', 'RunSpec', 'build_run_spec', 'DispatchOrchestrator']
