"""Test configuration and fixtures."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from workflow_engine.engine.models import Action, State
from workflow_engine.engine.service import WorkflowService


@pytest.fixture
def approval_states() -> list[State]:
    """pending (initial) -> approved -> completed (final)."""
    return [
        State(id="pending", name="Pending", is_initial=True),
        State(id="approved", name="Approved"),
        State(id="completed", name="Completed", is_final=True),
    ]


@pytest.fixture
def approval_actions() -> list[Action]:
    return [
        Action(id="approve", name="Approve", from_states=("pending",), to_state="approved"),
        Action(id="complete", name="Complete", from_states=("approved",), to_state="completed"),
    ]


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Provide predictable ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Provide a clock advancing one second per call."""
    start = datetime(2025, 1, 1, tzinfo=UTC)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def service(id_factory: Callable[[], str], clock: Callable[[], datetime]) -> WorkflowService:
    return WorkflowService(id_factory=id_factory, clock=clock)
