from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a builder for throwaway source repositories under tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed timestamp so rendered output is stable."""
    return lambda: datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
