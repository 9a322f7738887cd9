"""CLI entrypoint for the workflow engine.

Commands:
- serve:    run the REST API
- validate: check a definition file without storing it
- simulate: run a sequence of actions against a definition file in memory
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from workflow_engine import __version__
from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.errors import WorkflowEngineError
from workflow_engine.engine.logging import configure_logging
from workflow_engine.engine.models import Action, State
from workflow_engine.engine.service import WorkflowService
from workflow_engine.engine.validator import validate
from workflow_engine.server.config import ServerSettings

logger = logging.getLogger(__name__)

_STATES = TypeAdapter(list[State])
_ACTIONS = TypeAdapter(list[Action])


@dataclass(frozen=True, slots=True)
class DefinitionFile:
    name: str
    states: list[State]
    actions: list[Action]


class DefinitionFileError(Exception):
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-engine",
        description="Define and run finite-state workflows",
    )
    parser.add_argument("--version", action="version", version=f"workflow-engine {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the REST API")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind address (defaults to WORKFLOW_ENGINE_HOST or 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (defaults to WORKFLOW_ENGINE_PORT or 8000)",
    )

    validate_cmd = subparsers.add_parser(
        "validate", help="Validate a workflow definition JSON file"
    )
    validate_cmd.add_argument(
        "file", type=Path, help="JSON file with 'name', 'states' and 'actions'"
    )

    simulate = subparsers.add_parser(
        "simulate",
        help="Start an instance of a definition file and execute actions in order",
    )
    simulate.add_argument(
        "file", type=Path, help="JSON file with 'name', 'states' and 'actions'"
    )
    simulate.add_argument("actions", nargs="+", help="Action ids to execute, in order")

    return parser


def load_definition_file(path: Path) -> DefinitionFile:
    """Read a ``{name, states, actions}`` JSON document.

    Raises:
        DefinitionFileError: if the file is unreadable or not shaped like a definition.
    """

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DefinitionFileError(f"Cannot read {path}: {e}") from e

    if not isinstance(raw, dict):
        raise DefinitionFileError(f"{path} must contain a JSON object")

    name = raw.get("name", "")
    if not isinstance(name, str):
        raise DefinitionFileError(f"{path}: 'name' must be a string")

    try:
        states = _STATES.validate_python(raw.get("states", []))
        actions = _ACTIONS.validate_python(raw.get("actions", []))
    except ValidationError as e:
        raise DefinitionFileError(f"Malformed definition file {path}:\n{e}") from e

    return DefinitionFile(name=name, states=states, actions=actions)


def _serve(args: argparse.Namespace, server_settings: ServerSettings) -> int:
    import uvicorn

    from workflow_engine.server.app import create_app

    host = args.host or server_settings.host
    port = args.port or server_settings.port
    logger.info("Starting API server", extra={"host": host, "port": port})
    uvicorn.run(create_app(settings=server_settings), host=host, port=port, log_config=None)
    return 0


def _validate(args: argparse.Namespace) -> int:
    body = load_definition_file(args.file)
    result = validate(body.name, body.states, body.actions)
    if result.error is not None:
        print(f"Invalid: {result.error.message}", file=sys.stderr)
        return 1
    definition = result.unwrap()
    print(
        f"Valid: {definition.name!r} "
        f"({len(definition.states)} states, {len(definition.actions)} actions)"
    )
    return 0


def _simulate(args: argparse.Namespace) -> int:
    body = load_definition_file(args.file)
    service = WorkflowService()
    try:
        definition = service.create_definition(body.name, body.states, body.actions).unwrap()
        instance = service.start_instance(definition.id).unwrap()
        for action_id in args.actions:
            instance = service.execute_action(instance.id, action_id).unwrap()
    except WorkflowEngineError as e:
        print(f"{e.kind.value}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(instance.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings()
        server_settings = ServerSettings() if args.command == "serve" else None
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if server_settings is not None:
        return _serve(args, server_settings)

    try:
        if args.command == "validate":
            return _validate(args)
        if args.command == "simulate":
            return _simulate(args)
    except DefinitionFileError as e:
        print(e, file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
