"""Server configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

CRON_SECRET_ENV = "RBS_CRON_SECRET"


@dataclass
class ServerConfig:
    """Configuration for the RBS pipeline server."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8430

    # Mode: "full" (REST + sync worker), "rest"
    mode: str = "full"

    # Sync
    sync_interval: int = 3600  # seconds between due-source checks
    sync_fetch_timeout: float = 30.0  # seconds per source fetch
    schedule_timezone: str = "UTC"  # zone the nightly sync hour is read in

    # Bearer token required by POST /sync/trigger when set
    cron_secret: str | None = field(default_factory=lambda: os.environ.get(CRON_SECRET_ENV))

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
