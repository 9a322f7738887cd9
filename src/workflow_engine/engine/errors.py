"""Error kinds and the result type returned by fallible engine operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_DEFINITION = "invalid_definition"
    DEFINITION_NOT_FOUND = "definition_not_found"
    INSTANCE_NOT_FOUND = "instance_not_found"
    ACTION_NOT_FOUND = "action_not_found"
    ACTION_DISABLED = "action_disabled"
    TERMINAL_STATE = "terminal_state"
    ILLEGAL_TRANSITION = "illegal_transition"


class InvalidDefinitionReason(str, Enum):
    """Sub-reasons for :attr:`ErrorKind.INVALID_DEFINITION`."""

    MISSING_NAME = "missing_name"
    NO_STATES = "no_states"
    DUPLICATE_STATE_ID = "duplicate_state_id"
    DUPLICATE_ACTION_ID = "duplicate_action_id"
    INITIAL_STATE_COUNT = "initial_state_count"
    UNKNOWN_TARGET_STATE = "unknown_target_state"
    UNKNOWN_SOURCE_STATE = "unknown_source_state"


@dataclass(frozen=True, slots=True)
class WorkflowError:
    kind: ErrorKind
    message: str
    reason: InvalidDefinitionReason | None = None

    def __str__(self) -> str:
        return self.message


class WorkflowEngineError(Exception):
    """Raised by :meth:`Result.unwrap` when the result is a failure."""

    def __init__(self, error: WorkflowError) -> None:
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Either a value or a :class:`WorkflowError`, never both.

    Engine and service operations return this instead of raising so that each
    layer handles failures explicitly.
    """

    value: T | None = None
    error: WorkflowError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        reason: InvalidDefinitionReason | None = None,
    ) -> Result[T]:
        return cls(error=WorkflowError(kind=kind, message=message, reason=reason))

    def unwrap(self) -> T:
        if self.error is not None:
            raise WorkflowEngineError(self.error)
        # A successful result always carries its value.
        assert self.value is not None
        return self.value
