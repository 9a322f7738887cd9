"""Configuration for the REST server."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Settings for the REST API.

    Environment variables:
    - WORKFLOW_ENGINE_HOST
    - WORKFLOW_ENGINE_PORT
    - WORKFLOW_ENGINE_CORS_ORIGINS
    """

    host: str = Field(default="127.0.0.1", validation_alias="WORKFLOW_ENGINE_HOST")
    port: int = Field(default=8000, validation_alias="WORKFLOW_ENGINE_PORT", ge=1, le=65535)

    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="WORKFLOW_ENGINE_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
