# recipe_ingest/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from recipe_ingest.core.config import Settings
from recipe_ingest.core.responses import success_response
from recipe_ingest.dependencies import get_event_router, get_settings
from recipe_ingest.routers.envelope import to_response
from recipe_ingest.services.health import health_status_code, version_payload
from recipe_ingest.services.ingestion import EventRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    # Liveness only: if the process is serving requests, it's up
    return {"status": "ok", **version_payload(settings)}


@router.get("/health/ready")
async def ready(events: EventRouter = Depends(get_event_router)):
    report = await events.extraction.health_check()
    return to_response(success_response(report, health_status_code(report)))


@router.get("/version")
def version(settings: Settings = Depends(get_settings)):
    return version_payload(settings)
