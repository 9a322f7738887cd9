"""Pydantic request/response models for the REST server.

Domain models are returned as-is; these only cover request bodies and the
envelopes the engine itself has no type for.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from workflow_engine.engine.models import Action, State


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateWorkflowRequest(_CamelModel):
    # Missing fields default to empty so the validator reports them (400),
    # not request parsing.
    name: str = ""
    states: list[State] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)


class ExecuteActionRequest(_CamelModel):
    action_id: str = ""


class ErrorResponse(BaseModel):
    error: str
    kind: str


class HealthResponse(BaseModel):
    status: str
    version: str
    definitions: int
    instances: int
