"""Tests for building a RunSpec from overrides and the local checkout."""

import pytest

from rgh.errors import RepoNotFoundError
from rgh.run import spec as spec_module
from rgh.run.spec import RunOptions, RunSpec, build_run_spec


@pytest.fixture
def fake_git(monkeypatch, tmp_path):
    """Replace the git helpers with recorders."""
    calls = []

    def find_repo_root(start):
        calls.append(('find_repo_root', start))
        return tmp_path

    def get_repo_id(root):
        calls.append(('get_repo_id', root))
        return 'octo/widgets'

    def get_repo_ref(root):
        calls.append(('get_repo_ref', root))
        return 'main'

    def maybe_commit(root, read_message, push_changes=False):
        calls.append(('maybe_commit', root, read_message(), push_changes))
        return 'abc123'

    git = spec_module.git_repo
    monkeypatch.setattr(git, 'find_repo_root', find_repo_root)
    monkeypatch.setattr(git, 'get_repo_id', get_repo_id)
    monkeypatch.setattr(git, 'get_repo_ref', get_repo_ref)
    monkeypatch.setattr(git, 'maybe_commit', maybe_commit)
    return calls


class TestBuildRunSpec:
    """Tests for build_run_spec."""

    def test_overrides_skip_checkout(self, fake_git):
        spec = build_run_spec(RunOptions(), 'build', repo='o/n', ref='v1', inputs={'a': '1'})

        assert spec == RunSpec(repo='o/n', ref='v1', workflow='build', inputs={'a': '1'})
        assert fake_git == []

    def test_defaults_from_checkout(self, fake_git, tmp_path):
        spec = build_run_spec(RunOptions(), 'build', cwd=tmp_path)

        assert spec.repo == 'octo/widgets'
        assert spec.ref == 'main'
        # Root is looked up once and shared
        assert [c[0] for c in fake_git] == ['find_repo_root', 'get_repo_id', 'get_repo_ref']

    def test_commit_and_push(self, fake_git, tmp_path):
        options = RunOptions(commit=True, push=True)

        build_run_spec(options, 'build', repo='o/n', ref='main', cwd=tmp_path,
                       read_message=lambda: 'wip')

        assert ('maybe_commit', tmp_path, 'wip', True) in fake_git

    def test_commit_needs_message_source(self, fake_git):
        with pytest.raises(ValueError):
            build_run_spec(RunOptions(commit=True), 'build', repo='o/n', ref='main')

    def test_missing_checkout(self, monkeypatch, tmp_path):
        def find_repo_root(start):
            raise RepoNotFoundError("repo root not found")

        monkeypatch.setattr(spec_module.git_repo, 'find_repo_root', find_repo_root)

        with pytest.raises(RepoNotFoundError):
            build_run_spec(RunOptions(), 'build', cwd=tmp_path)
