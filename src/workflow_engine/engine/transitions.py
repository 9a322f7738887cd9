"""Runtime transition engine.

An instance is a token on a fixed directed graph: states are nodes and
actions are labelled edges with one or more source nodes and a single target
node. A move is legal when the edge is enabled, its source set contains the
current node and the current node is not final. Final nodes have no
out-edges, whatever the action definitions say.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from .errors import ErrorKind, Result
from .models import Action, HistoryEntry, WorkflowDefinition, WorkflowInstance

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AppliedTransition:
    new_state_id: str
    entry: HistoryEntry
    instance: WorkflowInstance


def execute(
    instance: WorkflowInstance,
    definition: WorkflowDefinition,
    action_id: str,
    *,
    now: datetime,
) -> Result[AppliedTransition]:
    """Check and apply ``action_id`` to ``instance``.

    The input instance is never modified. On success the returned
    :class:`AppliedTransition` holds the advanced snapshot; on failure nothing
    has changed.

    Checks, in order:
      1. the action exists (``ACTION_NOT_FOUND``)
      2. the action is enabled (``ACTION_DISABLED``)
      3. the current state is not final (``TERMINAL_STATE``)
      4. the current state is a source of the action (``ILLEGAL_TRANSITION``)
    """

    action = definition.find_action(action_id)
    if action is None:
        return Result.failure(ErrorKind.ACTION_NOT_FOUND, f"Action not found: {action_id}")

    if not action.enabled:
        return Result.failure(ErrorKind.ACTION_DISABLED, f"Action is disabled: {action_id}")

    current = definition.find_state(instance.current_state_id)
    if current is None:
        logger.error(
            "Instance current state missing from its definition",
            extra={
                "instance_id": instance.id,
                "definition_id": definition.id,
                "state_id": instance.current_state_id,
            },
        )
        return Result.failure(
            ErrorKind.ILLEGAL_TRANSITION,
            f"Current state {instance.current_state_id} is not part of "
            f"workflow definition {definition.id}",
        )

    # Final states block every action, including ones that list them as a source.
    if current.is_final:
        return Result.failure(
            ErrorKind.TERMINAL_STATE, "Cannot execute actions on final states"
        )

    if instance.current_state_id not in action.from_states:
        return Result.failure(
            ErrorKind.ILLEGAL_TRANSITION,
            f"Action {action_id} cannot be executed from state {instance.current_state_id}",
        )

    entry = HistoryEntry(
        action_id=action.id,
        action_name=action.name,
        from_state_id=instance.current_state_id,
        to_state_id=action.to_state,
        timestamp=now,
    )
    return Result.success(
        AppliedTransition(
            new_state_id=action.to_state,
            entry=entry,
            instance=instance.advanced(entry),
        )
    )


def available_actions(
    instance: WorkflowInstance, definition: WorkflowDefinition
) -> tuple[Action, ...]:
    """Return the actions :func:`execute` would currently accept."""

    current = definition.find_state(instance.current_state_id)
    if current is None or current.is_final:
        return ()
    return tuple(
        a
        for a in definition.actions
        if a.enabled and instance.current_state_id in a.from_states
    )
