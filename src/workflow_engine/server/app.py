"""FastAPI app factory.

Endpoints are intentionally thin wrappers over :class:`WorkflowService`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from workflow_engine import __version__
from workflow_engine.engine.service import WorkflowService
from workflow_engine.server.config import ServerSettings
from workflow_engine.server.models import ErrorResponse
from workflow_engine.server.routes import router

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = str(err.get("msg", "invalid value"))
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def create_app(
    service: WorkflowService | None = None, settings: ServerSettings | None = None
) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="Workflow Engine",
        version=__version__,
        description="REST API for defining and running finite-state workflows.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # One service (and so one store of each kind) per process.
    app.state.settings = settings
    app.state.workflow_service = service if service is not None else WorkflowService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _bad_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _describe_validation_error(exc)
        logger.info("Malformed request rejected", extra={"error": message})
        body = ErrorResponse(error=message, kind="invalid_request")
        return JSONResponse(status_code=400, content=body.model_dump())

    app.include_router(router, prefix="/api")

    @app.get("/", include_in_schema=False)
    def index() -> PlainTextResponse:
        return PlainTextResponse(
            "Workflow Engine API is running. Visit /api/workflows or /api/docs.\n"
        )

    return app
