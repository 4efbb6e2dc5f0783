"""Dependency injection: sync service lookup and cron authorization."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from rbs_pipeline.ingestion.sync import SyncService
from rbs_pipeline.server.config import ServerConfig


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


def get_sync_service(request: Request) -> SyncService:
    """Get the shared SyncService from app state."""
    return request.app.state.sync_service


def verify_cron_secret(
    request: Request,
    authorization: str | None = Header(default=None),
) -> None:
    """Require ``Authorization: Bearer <secret>`` when a cron secret is configured."""
    secret = request.app.state.config.cron_secret
    if secret and authorization != f"Bearer {secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")
