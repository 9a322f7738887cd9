"""Workflow service: the boundary the engine exposes to its callers.

Coordinates the validator, the transition engine and the two repositories.
Definitions are read-only once stored. Instance advancement is serialized per
instance so that two callers can never both act on the same current state.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from . import transitions
from .errors import ErrorKind, Result
from .models import Action, State, WorkflowDefinition, WorkflowInstance
from .store import InMemoryRepository, KeyedRepository
from .validator import validate

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class WorkflowService:
    def __init__(
        self,
        definitions: KeyedRepository[WorkflowDefinition] | None = None,
        instances: KeyedRepository[WorkflowInstance] | None = None,
        *,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._definitions: KeyedRepository[WorkflowDefinition] = (
            definitions if definitions is not None else InMemoryRepository()
        )
        self._instances: KeyedRepository[WorkflowInstance] = (
            instances if instances is not None else InMemoryRepository()
        )
        self._new_id = id_factory
        self._now = clock

        self._locks_guard = threading.Lock()
        self._instance_locks: dict[str, threading.Lock] = {}

    def _instance_lock(self, instance_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._instance_locks.get(instance_id)
            if lock is None:
                lock = threading.Lock()
                self._instance_locks[instance_id] = lock
            return lock

    # Definitions

    def create_definition(
        self, name: str, states: Sequence[State], actions: Sequence[Action]
    ) -> Result[WorkflowDefinition]:
        validated = validate(name, states, actions)
        if validated.error is not None:
            logger.info(
                "Workflow definition rejected",
                extra={
                    "workflow_name": name,
                    "reason": validated.error.reason.value if validated.error.reason else None,
                    "error": validated.error.message,
                },
            )
            return Result(error=validated.error)

        body = validated.unwrap()
        definition = WorkflowDefinition(
            id=self._new_id(),
            name=body.name,
            states=body.states,
            actions=body.actions,
            created_at=self._now(),
        )
        self._definitions.put(definition.id, definition)
        logger.info(
            "Workflow definition created",
            extra={
                "definition_id": definition.id,
                "workflow_name": definition.name,
                "states": len(definition.states),
                "actions": len(definition.actions),
            },
        )
        return Result.success(definition)

    def get_definition(self, definition_id: str) -> WorkflowDefinition | None:
        return self._definitions.get(definition_id)

    def list_definitions(self) -> list[WorkflowDefinition]:
        return self._definitions.list()

    # Instances

    def start_instance(self, definition_id: str) -> Result[WorkflowInstance]:
        definition = self._definitions.get(definition_id)
        if definition is None:
            return Result.failure(
                ErrorKind.DEFINITION_NOT_FOUND,
                f"Workflow definition not found: {definition_id}",
            )

        instance = WorkflowInstance(
            id=self._new_id(),
            definition_id=definition.id,
            current_state_id=definition.initial_state().id,
            history=(),
            created_at=self._now(),
        )
        self._instances.put(instance.id, instance)
        logger.info(
            "Workflow instance started",
            extra={
                "instance_id": instance.id,
                "definition_id": definition.id,
                "state_id": instance.current_state_id,
            },
        )
        return Result.success(instance)

    def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        return self._instances.get(instance_id)

    def list_instances(self, definition_id: str | None = None) -> list[WorkflowInstance]:
        instances = self._instances.list()
        if definition_id is None:
            return instances
        return [i for i in instances if i.definition_id == definition_id]

    def execute_action(self, instance_id: str, action_id: str) -> Result[WorkflowInstance]:
        """Advance an instance by one action.

        The fetch, the legality checks and the store of the new snapshot all
        happen under the instance's lock. Locks are only created for stored
        instances, so unknown ids leave no trace.
        """

        if self._instances.get(instance_id) is None:
            return Result.failure(
                ErrorKind.INSTANCE_NOT_FOUND,
                f"Workflow instance not found: {instance_id}",
            )

        with self._instance_lock(instance_id):
            # Re-read under the lock: another caller may have advanced it.
            instance = self._instances.get(instance_id)
            assert instance is not None  # instances are never removed

            definition = self._definitions.get(instance.definition_id)
            if definition is None:
                logger.error(
                    "Instance references a missing workflow definition",
                    extra={"instance_id": instance_id, "definition_id": instance.definition_id},
                )
                return Result.failure(
                    ErrorKind.DEFINITION_NOT_FOUND,
                    f"Workflow definition not found: {instance.definition_id}",
                )

            outcome = transitions.execute(instance, definition, action_id, now=self._now())
            if outcome.error is not None:
                logger.info(
                    "Action rejected",
                    extra={
                        "instance_id": instance_id,
                        "action_id": action_id,
                        "state_id": instance.current_state_id,
                        "kind": outcome.error.kind.value,
                    },
                )
                return Result(error=outcome.error)

            applied = outcome.unwrap()
            self._instances.put(instance_id, applied.instance)

        logger.info(
            "Action executed",
            extra={
                "instance_id": instance_id,
                "action_id": action_id,
                "from_state_id": applied.entry.from_state_id,
                "to_state_id": applied.new_state_id,
            },
        )
        return Result.success(applied.instance)

    def available_actions(self, instance_id: str) -> Result[tuple[Action, ...]]:
        instance = self._instances.get(instance_id)
        if instance is None:
            return Result.failure(
                ErrorKind.INSTANCE_NOT_FOUND,
                f"Workflow instance not found: {instance_id}",
            )
        definition = self._definitions.get(instance.definition_id)
        if definition is None:
            return Result.failure(
                ErrorKind.DEFINITION_NOT_FOUND,
                f"Workflow definition not found: {instance.definition_id}",
            )
        return Result.success(transitions.available_actions(instance, definition))

    def counts(self) -> tuple[int, int]:
        """Return ``(definitions, instances)`` currently stored."""

        return len(self._definitions), len(self._instances)
