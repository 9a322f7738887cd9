"""Workflow REST API.

All routes are mounted under `/api`. Handlers are thin: they unpack the
request, call the :class:`WorkflowService` and map failed results to
`400 {"error", "kind"}`. Plain lookups of unknown ids are 404.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from workflow_engine import __version__
from workflow_engine.engine.errors import WorkflowError
from workflow_engine.engine.models import Action, WorkflowDefinition, WorkflowInstance
from workflow_engine.engine.service import WorkflowService
from workflow_engine.server.models import (
    CreateWorkflowRequest,
    ErrorResponse,
    ExecuteActionRequest,
    HealthResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_BAD_REQUEST: dict[int | str, dict[str, object]] = {400: {"model": ErrorResponse}}


def _service(request: Request) -> WorkflowService:
    service = getattr(request.app.state, "workflow_service", None)
    if not isinstance(service, WorkflowService):
        # This should never happen for the real app, but keeps the API fail-fast.
        raise HTTPException(status_code=500, detail="Workflow service not configured")
    return service


def _error_response(error: WorkflowError) -> JSONResponse:
    body = ErrorResponse(error=error.message, kind=error.kind.value)
    return JSONResponse(status_code=400, content=body.model_dump())


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    definitions, instances = _service(request).counts()
    return HealthResponse(
        status="ok", version=__version__, definitions=definitions, instances=instances
    )


# Workflow definitions


@router.post(
    "/workflows",
    status_code=201,
    response_model=WorkflowDefinition,
    responses=_BAD_REQUEST,
)
def create_workflow(
    req: CreateWorkflowRequest, request: Request, response: Response
) -> WorkflowDefinition | JSONResponse:
    result = _service(request).create_definition(req.name, req.states, req.actions)
    if result.error is not None:
        return _error_response(result.error)
    definition = result.unwrap()
    response.headers["Location"] = f"/api/workflows/{definition.id}"
    return definition


@router.get("/workflows", response_model=list[WorkflowDefinition])
def list_workflows(request: Request) -> list[WorkflowDefinition]:
    return _service(request).list_definitions()


@router.get("/workflows/{definition_id}", response_model=WorkflowDefinition)
def get_workflow(definition_id: str, request: Request) -> WorkflowDefinition:
    definition = _service(request).get_definition(definition_id)
    if definition is None:
        raise HTTPException(status_code=404, detail="Workflow definition not found")
    return definition


# Workflow instances


@router.post(
    "/workflows/{definition_id}/instances",
    status_code=201,
    response_model=WorkflowInstance,
    responses=_BAD_REQUEST,
)
def start_instance(
    definition_id: str, request: Request, response: Response
) -> WorkflowInstance | JSONResponse:
    result = _service(request).start_instance(definition_id)
    if result.error is not None:
        return _error_response(result.error)
    instance = result.unwrap()
    response.headers["Location"] = f"/api/instances/{instance.id}"
    return instance


@router.get("/instances", response_model=list[WorkflowInstance])
def list_instances(
    request: Request,
    definition_id: str | None = Query(default=None, alias="definitionId"),
) -> list[WorkflowInstance]:
    return _service(request).list_instances(definition_id=definition_id)


@router.get("/instances/{instance_id}", response_model=WorkflowInstance)
def get_instance(instance_id: str, request: Request) -> WorkflowInstance:
    instance = _service(request).get_instance(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail="Workflow instance not found")
    return instance


@router.get("/instances/{instance_id}/actions", response_model=list[Action])
def list_available_actions(instance_id: str, request: Request) -> list[Action]:
    result = _service(request).available_actions(instance_id)
    if result.error is not None:
        raise HTTPException(status_code=404, detail=result.error.message)
    return list(result.unwrap())


@router.post(
    "/instances/{instance_id}/execute",
    response_model=WorkflowInstance,
    responses=_BAD_REQUEST,
)
def execute_action(
    instance_id: str, req: ExecuteActionRequest, request: Request
) -> WorkflowInstance | JSONResponse:
    result = _service(request).execute_action(instance_id, req.action_id)
    if result.error is not None:
        return _error_response(result.error)
    return result.unwrap()
