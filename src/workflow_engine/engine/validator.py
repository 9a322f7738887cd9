"""Structural validation of workflow definitions.

Validation is pure: no I/O, no clock and no id generation. Checks run in a
fixed order and stop at the first violation, so a given malformed input
always fails with the same reason.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .errors import ErrorKind, InvalidDefinitionReason, Result
from .models import Action, State


@dataclass(frozen=True, slots=True)
class ValidatedDefinition:
    """An accepted definition body, detached from the caller's collections."""

    name: str
    states: tuple[State, ...]
    actions: tuple[Action, ...]


def _duplicates(ids: Iterable[str]) -> list[str]:
    # Every duplicated id once, in first-seen order.
    counts = Counter(ids)
    return [key for key, count in counts.items() if count > 1]


def _invalid(reason: InvalidDefinitionReason, message: str) -> Result[ValidatedDefinition]:
    return Result.failure(ErrorKind.INVALID_DEFINITION, message, reason=reason)


def validate(
    name: str, states: Sequence[State], actions: Sequence[Action]
) -> Result[ValidatedDefinition]:
    """Validate a proposed definition.

    Returns a :class:`ValidatedDefinition` on success, or an
    ``INVALID_DEFINITION`` failure whose ``reason`` identifies the rule broken.
    """

    if not name or not name.strip():
        return _invalid(InvalidDefinitionReason.MISSING_NAME, "Workflow name is required")

    if not states:
        return _invalid(InvalidDefinitionReason.NO_STATES, "At least one state is required")

    duplicate_states = _duplicates(s.id for s in states)
    if duplicate_states:
        return _invalid(
            InvalidDefinitionReason.DUPLICATE_STATE_ID,
            f"Duplicate state IDs found: {', '.join(duplicate_states)}",
        )

    duplicate_actions = _duplicates(a.id for a in actions)
    if duplicate_actions:
        return _invalid(
            InvalidDefinitionReason.DUPLICATE_ACTION_ID,
            f"Duplicate action IDs found: {', '.join(duplicate_actions)}",
        )

    initial_count = sum(1 for s in states if s.is_initial)
    if initial_count != 1:
        return _invalid(
            InvalidDefinitionReason.INITIAL_STATE_COUNT,
            "Exactly one initial state is required",
        )

    state_ids = {s.id for s in states}
    for action in actions:
        if action.to_state not in state_ids:
            return _invalid(
                InvalidDefinitionReason.UNKNOWN_TARGET_STATE,
                f"Action {action.id} references unknown target state: {action.to_state}",
            )
        for source in action.from_states:
            if source not in state_ids:
                return _invalid(
                    InvalidDefinitionReason.UNKNOWN_SOURCE_STATE,
                    f"Action {action.id} references unknown source state: {source}",
                )

    return Result.success(
        ValidatedDefinition(name=name, states=tuple(states), actions=tuple(actions))
    )
