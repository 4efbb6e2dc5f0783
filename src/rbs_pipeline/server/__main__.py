"""CLI entrypoint: python -m rbs_pipeline.server"""

from __future__ import annotations

import argparse
import logging

from rbs_pipeline.server.config import CRON_SECRET_ENV, ServerConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="rbs-pipeline-server",
        description="RBS Pipeline Server: REST imports + background sheet sync",
    )
    p.add_argument("--mode", choices=["full", "rest"], default="full",
                    help="Server mode (default: full)")
    p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p.add_argument("--port", type=int, default=8430, help="Bind port (default: 8430)")

    # Sync
    p.add_argument("--sync-interval", type=int, default=3600,
                    help="Seconds between checks for due sync sources (default: 3600)")
    p.add_argument("--sync-timeout", type=float, default=30.0,
                    help="Per-source fetch timeout in seconds (default: 30)")
    p.add_argument("--schedule-timezone", default="UTC",
                    help="Timezone for the 02:00 nightly sync, e.g. Asia/Jerusalem (default: UTC)")
    p.add_argument("--cron-secret", default=None,
                    help=f"Bearer token for POST /sync/trigger (default: ${CRON_SECRET_ENV})")
    p.add_argument("--no-sync", action="store_true",
                    help="Disable the background sync worker")

    # Logging
    p.add_argument("--log-level", default="INFO",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    mode = args.mode
    if args.no_sync and mode == "full":
        mode = "rest"

    config = ServerConfig(
        host=args.host,
        port=args.port,
        mode=mode,
        sync_interval=args.sync_interval,
        sync_fetch_timeout=args.sync_timeout,
        schedule_timezone=args.schedule_timezone,
    )
    if args.cron_secret:
        config.cron_secret = args.cron_secret
    return config


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = build_config(args)
    _run_rest(config)


def _run_rest(config: ServerConfig) -> None:
    import uvicorn

    from rbs_pipeline.server.rest.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
