# recipe_ingest/services/extraction.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from recipe_ingest.core.config import Settings
from recipe_ingest.core.errors import InputError, InvalidRecipeError
from recipe_ingest.models.recipe import ExtractionMetadata, ExtractionResult, Recipe
from recipe_ingest.services.bedrock import BedrockRecipeExtractor
from recipe_ingest.services.recipe_store import RecipeStoreClient
from recipe_ingest.services.validation import validate_recipe

log = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecipeExtractionService:
    """Raw text -> Bedrock -> validation -> recipe store, whatever the text came from."""

    def __init__(self, settings: Settings, extractor: BedrockRecipeExtractor, store: RecipeStoreClient):
        self.settings = settings
        self.extractor = extractor
        self.store = store

    async def extract_recipe_from_text(self, recipe_text: str) -> ExtractionResult:
        if not isinstance(recipe_text, str) or not recipe_text.strip():
            raise InputError("Recipe text is required and cannot be empty")

        log.info("starting recipe extraction", extra={"text_length": len(recipe_text)})
        candidate = await self.extractor.extract_structured_recipe(recipe_text)

        validation = validate_recipe(candidate)
        if not validation.valid:
            log.warning("recipe validation failed", extra={"errors": validation.errors})
            raise InvalidRecipeError(validation.errors)

        recipe = Recipe.model_validate(candidate)

        # store failures are reported in the result, never raised
        try:
            downstream = await self.store.send_recipe(recipe.model_dump(mode="json"))
        except Exception as e:
            log.error("failed to send recipe to store", extra={"error": str(e)})
            downstream = {"error": str(e), "sent": False}

        return ExtractionResult(
            recipe=recipe,
            downstream_response=downstream,
            metadata=ExtractionMetadata(extracted_at=_now_iso(), model_used=self.settings.model_id),
        )

    async def health_check(self) -> Dict[str, Any]:
        try:
            backend_ok = await self.extractor.check_availability()
            downstream_ok = await self.store.check_availability()
        except Exception as e:
            return {"status": "unhealthy", "error": str(e), "timestamp": _now_iso()}

        return {
            "status": "healthy" if backend_ok and downstream_ok else "degraded",
            "services": {
                "backend": "available" if backend_ok else "unavailable",
                "downstream": "available" if downstream_ok else "unavailable",
            },
            "timestamp": _now_iso(),
        }
