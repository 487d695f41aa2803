"""Shared fixtures for shepherd tests."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock

import pytest

from shepherd.core.config import ShepherdSettings
from shepherd.core.projects import Project
from shepherd.git.models import FetchResult, StatusResult
from shepherd.git.repository import GitRepository


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(ShepherdSettings.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("SHEPHERD_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def project(tmp_path):
    return Project(
        name="test",
        path=tmp_path,
        default_branch="master",
        safe_branches=[],
        commit_prefix=-1,
    )


@pytest.fixture
def repo():
    """GitRepository double; every coroutine method is an AsyncMock."""
    mock = AsyncMock(spec=GitRepository)
    mock.fetch.return_value = FetchResult(updated_branches=[])
    return mock


def make_status(branch="master", modified=None, **kwargs) -> StatusResult:
    return StatusResult(
        modified_files=modified or [],
        branch=branch,
        remote_branch=f"origin/{branch}",
        commit="123456789012",
        **kwargs,
    )


@pytest.fixture
def status_for():
    return make_status
