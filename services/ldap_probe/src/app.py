"""LDAP probe exporter.

Probes one directory server every PROBE_INTERVAL_SECONDS and serves the
connection, bind and search delays on /metrics for Prometheus.

Run:
    ldap-probe
    # or
    python -m services.ldap_probe.src.app
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

import uvicorn
from fastapi import FastAPI

from libs.common.config import ConfigurationError, ProbeConfiguration, load_configuration, load_env_file
from libs.common.logging_setup import configure_logging
from services.ldap_probe.src.clients.ldap_client import DirectoryClient
from services.ldap_probe.src.probe.executor import ProbeExecutor
from services.ldap_probe.src.probe.scheduler import ProbeScheduler
from services.ldap_probe.src.routes import probe
from services.ldap_probe.src.telemetry.probe_metrics import ProbeMetrics

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def _default_client(config: ProbeConfiguration) -> DirectoryClient:
    from services.ldap_probe.src.clients.ldap_client import Ldap3DirectoryClient

    return Ldap3DirectoryClient(timeout=config.phase_timeout_seconds)


def create_app(
    config: ProbeConfiguration,
    client: Optional[DirectoryClient] = None,
    metrics: Optional[ProbeMetrics] = None,
) -> FastAPI:
    """Wire the executor, scheduler and metrics sink into a FastAPI app.

    The scheduler starts with the app and stops on shutdown.
    """
    app = FastAPI(title="LDAP Probe Exporter")

    executor = ProbeExecutor(config, client or _default_client(config))
    app.state.config = config
    app.state.metrics = metrics or ProbeMetrics()
    app.state.scheduler = ProbeScheduler(
        executor, app.state.metrics, interval_seconds=config.probe_interval_seconds
    )

    @app.on_event("startup")
    async def startup_event() -> None:
        logger.info(
            "Starting LDAP probe",
            extra={
                "context": {
                    "ldap_url": config.ldap_url,
                    "base_dn": config.base_dn,
                    "search_filter": config.search_filter,
                    "search_attributes": config.search_attributes,
                }
            },
        )
        await app.state.scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await app.state.scheduler.stop()

    @app.get("/healthz", tags=["health"])
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    app.include_router(probe.router)
    return app


def main() -> None:
    """Console entry point: resolve configuration, then serve until stopped."""
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env_loaded = load_env_file(REPO_ROOT / ".env" / f".env.{env_name}")
    # LOG_LEVEL is validated with the rest of the configuration
    configure_logging("INFO")

    try:
        config = load_configuration()
    except ConfigurationError as exc:
        logger.critical(str(exc))
        sys.exit(1)

    configure_logging(config.log_level)
    if env_loaded:
        logger.info("Loaded environment file for %s", env_name)

    app = create_app(config)
    uvicorn.run(app, host="0.0.0.0", port=config.metrics_port, log_config=None)


if __name__ == "__main__":
    main()
