"""Workflow Engine.

User-configurable finite state machines:
- workflow definitions validated once and stored immutably
- instances advanced by named actions, with full transition history
- a REST API and a small CLI over the same service
"""

__version__ = "0.1.0"

from workflow_engine.engine.config import EngineSettings

__all__ = ["__version__", "EngineSettings"]
