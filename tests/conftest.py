"""Shared test fixtures."""

import io
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def fake_git(tmp_path):
    """A placeholder git executable; Popen is always mocked in tests."""
    exe = tmp_path / "bin" / "git"
    exe.parent.mkdir(parents=True)
    exe.write_text("")
    return exe


@pytest.fixture
def git_config(fake_git):
    """Config with an equal two-phase push table."""
    return {
        "git": {"executable": str(fake_git), "env": {}},
        "push": {"remote": "origin", "progress": True, "set_upstream": False},
        "progress": {"phases": [
            {"title": "Compressing objects", "weight": 0.5},
            {"title": "Writing objects", "weight": 0.5},
        ]},
    }


@pytest.fixture
def repo_dir(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo


@pytest.fixture
def make_proc():
    """Factory for mocked Popen results with given streams and exit code.

    Streams are bytes, as from a real binary pipe.
    """
    def _make(stderr: str = "", stdout: str = "", returncode: int = 0) -> MagicMock:
        proc = MagicMock()
        proc.stdout = io.BytesIO(stdout.encode())
        proc.stderr = io.BytesIO(stderr.encode())
        proc.returncode = returncode
        proc.wait.return_value = returncode
        proc.poll.return_value = returncode
        return proc
    return _make
