from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from recipe_ingest.clients.aws import make_client
from recipe_ingest.core.config import Settings
from recipe_ingest.services.bedrock import BedrockRecipeExtractor
from recipe_ingest.services.extraction import RecipeExtractionService
from recipe_ingest.services.ingestion import EventRouter
from recipe_ingest.services.recipe_store import RecipeStoreClient
from recipe_ingest.services.textract import TextractService
from recipe_ingest.services.webpage import fetch_and_extract_webpage


def build_event_router(
    settings: Settings,
    *,
    bedrock_client: Optional[Any] = None,
    textract_client: Optional[Any] = None,
    lambda_client: Optional[Any] = None,
    fetch_page=fetch_and_extract_webpage,
) -> EventRouter:
    extraction = RecipeExtractionService(
        settings,
        BedrockRecipeExtractor(settings, bedrock_client or make_client("bedrock-runtime", settings)),
        RecipeStoreClient(settings, lambda_client or make_client("lambda", settings)),
    )
    textract = TextractService(textract_client or make_client("textract", settings))
    return EventRouter(settings, extraction, textract, fetch_page=fetch_page)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def get_event_router() -> EventRouter:
    return build_event_router(get_settings())
