"""Workflow domain models.

All models are immutable. JSON field names are lowerCamelCase aliases of the
snake_case attributes; either spelling is accepted on input.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class State(_FrozenModel):
    id: str
    name: str = ""
    is_initial: bool = False
    is_final: bool = False
    enabled: bool = True
    description: str | None = None


class Action(_FrozenModel):
    """A transition rule: one or more source states, exactly one target."""

    id: str
    name: str = ""
    enabled: bool = True
    from_states: tuple[str, ...] = Field(default_factory=tuple)
    to_state: str = ""


class HistoryEntry(_FrozenModel):
    action_id: str
    # Captured when the action runs, never re-derived from the definition.
    action_name: str
    from_state_id: str
    to_state_id: str
    timestamp: datetime


class WorkflowDefinition(_FrozenModel):
    id: str
    name: str
    states: tuple[State, ...]
    actions: tuple[Action, ...]
    created_at: datetime

    def initial_state(self) -> State:
        """Return the unique initial state.

        Definitions only exist after validation, so exactly one is present.
        """

        return next(s for s in self.states if s.is_initial)

    def find_state(self, state_id: str) -> State | None:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    def find_action(self, action_id: str) -> Action | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None


class WorkflowInstance(_FrozenModel):
    """One execution of a definition.

    Instances are snapshots: a transition produces a new instance rather than
    mutating this one.
    """

    id: str
    definition_id: str
    current_state_id: str
    history: tuple[HistoryEntry, ...] = Field(default_factory=tuple)
    created_at: datetime

    def advanced(self, entry: HistoryEntry) -> WorkflowInstance:
        return self.model_copy(
            update={
                "current_state_id": entry.to_state_id,
                "history": (*self.history, entry),
            }
        )
