#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the engine components directly, without the server:

* define a small approval workflow
* start an instance
* execute actions, including one that is rejected
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.logging import configure_logging
from workflow_engine.engine.models import Action, State
from workflow_engine.engine.service import WorkflowService


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a sample approval workflow.")
    parser.add_argument(
        "--actions",
        default="approve,complete,complete",
        help="Comma-separated action ids to execute in order",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(EngineSettings().log_level)

    service = WorkflowService()
    definition = service.create_definition(
        "Approval",
        states=[
            State(id="pending", name="Pending", is_initial=True),
            State(id="approved", name="Approved"),
            State(id="completed", name="Completed", is_final=True),
        ],
        actions=[
            Action(id="approve", name="Approve", from_states=("pending",), to_state="approved"),
            Action(
                id="complete", name="Complete", from_states=("approved",), to_state="completed"
            ),
        ],
    ).unwrap()

    instance = service.start_instance(definition.id).unwrap()
    print(f"Started instance {instance.id} in state {instance.current_state_id!r}")

    for action_id in (a.strip() for a in args.actions.split(",") if a.strip()):
        result = service.execute_action(instance.id, action_id)
        if result.error is not None:
            print(f"  {action_id}: rejected ({result.error.kind.value}: {result.error})")
            continue
        instance = result.unwrap()
        print(f"  {action_id}: now in {instance.current_state_id!r}")

    print(json.dumps(instance.model_dump(mode="json", by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
