from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from devassist.orchestrator import Orchestrator
from tests._fixtures.repo_builder import RepoBuilder

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a throwaway project rooted under the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TIME


@pytest.fixture
def orchestrator(fixed_clock) -> Orchestrator:
    """Orchestrator with a frozen clock so repeated runs compare equal."""
    return Orchestrator(clock=fixed_clock)
