"""Scrape and status endpoints for the LDAP probe."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

router = APIRouter(tags=["probe"])


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Prometheus text exposition of the probe gauges."""
    body, content_type = request.app.state.metrics.render()
    return Response(content=body, media_type=content_type)


@router.get("/probe/status")
def probe_status(request: Request) -> Dict[str, Any]:
    scheduler = request.app.state.scheduler
    if not scheduler.is_running:
        raise HTTPException(status_code=503, detail="Probe scheduler is not running")
    return scheduler.get_status()


__all__ = ["router"]
