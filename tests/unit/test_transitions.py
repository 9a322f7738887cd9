"""Unit tests for the transition engine.

Failed transitions must leave the instance untouched; successful ones produce
a new snapshot with exactly one more history entry.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from workflow_engine.engine.errors import ErrorKind
from workflow_engine.engine.models import (
    Action,
    State,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_engine.engine.transitions import available_actions, execute

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _definition(states: list[State], actions: list[Action]) -> WorkflowDefinition:
    return WorkflowDefinition(
        id="def-1",
        name="Test",
        states=tuple(states),
        actions=tuple(actions),
        created_at=NOW,
    )


def _instance(state_id: str) -> WorkflowInstance:
    return WorkflowInstance(
        id="inst-1",
        definition_id="def-1",
        current_state_id=state_id,
        created_at=NOW,
    )


@pytest.fixture
def definition(
    approval_states: list[State], approval_actions: list[Action]
) -> WorkflowDefinition:
    return _definition(approval_states, approval_actions)


def test_execute_advances_state_and_records_history(definition: WorkflowDefinition) -> None:
    instance = _instance("pending")

    applied = execute(instance, definition, "approve", now=NOW).unwrap()

    assert applied.new_state_id == "approved"
    assert applied.instance.current_state_id == "approved"
    assert len(applied.instance.history) == 1
    entry = applied.instance.history[0]
    assert entry == applied.entry
    assert entry.action_id == "approve"
    assert entry.action_name == "Approve"
    assert entry.from_state_id == "pending"
    assert entry.to_state_id == "approved"
    assert entry.timestamp == NOW

    # The input snapshot is never modified.
    assert instance.current_state_id == "pending"
    assert instance.history == ()


def test_unknown_action_is_rejected(definition: WorkflowDefinition) -> None:
    result = execute(_instance("pending"), definition, "teleport", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.ACTION_NOT_FOUND
    assert result.error.message == "Action not found: teleport"


def test_disabled_action_is_rejected_even_when_otherwise_legal(
    approval_states: list[State],
) -> None:
    definition = _definition(
        approval_states,
        [
            Action(
                id="approve",
                name="Approve",
                enabled=False,
                from_states=("pending",),
                to_state="approved",
            )
        ],
    )

    result = execute(_instance("pending"), definition, "approve", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.ACTION_DISABLED
    assert result.error.message == "Action is disabled: approve"


def test_action_from_wrong_state_is_illegal(definition: WorkflowDefinition) -> None:
    result = execute(_instance("pending"), definition, "complete", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION
    assert result.error.message == "Action complete cannot be executed from state pending"


def test_final_state_blocks_actions_listing_it_as_source() -> None:
    states = [
        State(id="open", is_initial=True),
        State(id="closed", is_final=True),
    ]
    actions = [
        Action(id="close", from_states=("open",), to_state="closed"),
        Action(id="reopen", from_states=("closed",), to_state="open"),
    ]
    definition = _definition(states, actions)

    result = execute(_instance("closed"), definition, "reopen", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.TERMINAL_STATE
    assert result.error.message == "Cannot execute actions on final states"


def test_terminal_state_is_reported_before_illegal_transition(
    definition: WorkflowDefinition,
) -> None:
    # "approve" does not list "completed" as a source; the final state still wins.
    result = execute(_instance("completed"), definition, "approve", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.TERMINAL_STATE


def test_disabled_is_reported_before_terminal_state(approval_states: list[State]) -> None:
    definition = _definition(
        approval_states,
        [Action(id="noop", enabled=False, from_states=("completed",), to_state="completed")],
    )

    result = execute(_instance("completed"), definition, "noop", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.ACTION_DISABLED


def test_action_with_several_sources_and_self_loop() -> None:
    states = [
        State(id="draft", is_initial=True),
        State(id="review"),
        State(id="done", is_final=True),
    ]
    actions = [
        Action(id="comment", name="Comment", from_states=("draft", "review"), to_state="review"),
    ]
    definition = _definition(states, actions)

    first = execute(_instance("draft"), definition, "comment", now=NOW).unwrap()
    second = execute(first.instance, definition, "comment", now=NOW).unwrap()

    assert second.instance.current_state_id == "review"
    assert [e.from_state_id for e in second.instance.history] == ["draft", "review"]


def test_current_state_missing_from_definition_is_not_applied(
    definition: WorkflowDefinition,
) -> None:
    result = execute(_instance("ghost"), definition, "approve", now=NOW)

    assert result.error is not None
    assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION


def test_available_actions_match_executable_actions() -> None:
    states = [
        State(id="a", is_initial=True),
        State(id="b"),
        State(id="z", is_final=True),
    ]
    actions = [
        Action(id="to_b", from_states=("a",), to_state="b"),
        Action(id="to_z", from_states=("a", "b"), to_state="z"),
        Action(id="off", enabled=False, from_states=("a",), to_state="b"),
        Action(id="back", from_states=("b", "z"), to_state="a"),
    ]
    definition = _definition(states, actions)

    for state_id in ("a", "b", "z"):
        instance = _instance(state_id)
        offered = {a.id for a in available_actions(instance, definition)}
        executable = {
            a.id for a in actions if execute(instance, definition, a.id, now=NOW).ok
        }
        assert offered == executable

    assert {a.id for a in available_actions(_instance("a"), definition)} == {"to_b", "to_z"}
    assert available_actions(_instance("z"), definition) == ()
