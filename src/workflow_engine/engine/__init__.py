"""Workflow engine core.

- a structural validator for workflow definitions
- a transition engine enforcing state-machine legality
- a service coordinating both over keyed repositories
"""

from workflow_engine.engine.errors import (
    ErrorKind,
    InvalidDefinitionReason,
    Result,
    WorkflowEngineError,
    WorkflowError,
)
from workflow_engine.engine.models import (
    Action,
    HistoryEntry,
    State,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_engine.engine.service import WorkflowService

__all__ = [
    "Action",
    "ErrorKind",
    "HistoryEntry",
    "InvalidDefinitionReason",
    "Result",
    "State",
    "WorkflowDefinition",
    "WorkflowEngineError",
    "WorkflowError",
    "WorkflowInstance",
    "WorkflowService",
]
