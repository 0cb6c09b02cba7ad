# recipe_ingest/routers/recipes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from recipe_ingest.dependencies import get_event_router
from recipe_ingest.routers.envelope import to_response
from recipe_ingest.services.ingestion import EventRouter

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/extract")
async def extract_recipe(request: Request, events: EventRouter = Depends(get_event_router)) -> Response:
    # Same path as an API Gateway proxy event, so malformed bodies get the same 400
    raw = await request.body()
    envelope = await events.handle_direct_request({"body": raw.decode("utf-8", "replace")})
    return to_response(envelope)
