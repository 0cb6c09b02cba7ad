from __future__ import annotations

import asyncio

import pytest
from botocore.exceptions import ClientError

from recipe_ingest.core.errors import BackendError, InputError, InvalidRecipeError
from recipe_ingest.services.bedrock import BedrockRecipeExtractor
from recipe_ingest.services.extraction import RecipeExtractionService
from recipe_ingest.services.recipe_store import RecipeStoreClient


def _service(settings, bedrock, store):
    return RecipeExtractionService(settings, BedrockRecipeExtractor(settings, bedrock), RecipeStoreClient(settings, store))


def test_successful_extraction(settings, fakes):
    store = fakes.Lambda()
    result = asyncio.run(_service(settings, fakes.Bedrock(), store).extract_recipe_from_text("Salade verte ..."))

    assert result.recipe.title == "Salade verte"
    assert len(result.recipe.ingredients) == 4
    assert result.downstream_response["sent"] is True
    assert result.metadata.model_used == "amazon.nova-lite-v1:0"
    assert result.metadata.extracted_at.endswith("+00:00")

    payload = result.to_payload()
    assert set(payload) == {"recipe", "downstreamResponse", "metadata"}
    assert set(payload["metadata"]) == {"extractedAt", "modelUsed"}
    assert len(store.calls) == 1


def test_store_failure_keeps_the_recipe(settings, fakes):
    ok = asyncio.run(_service(settings, fakes.Bedrock(), fakes.Lambda()).extract_recipe_from_text("x"))

    err = ClientError({"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "Invoke")
    failed = asyncio.run(_service(settings, fakes.Bedrock(), fakes.Lambda(error=err)).extract_recipe_from_text("x"))

    assert failed.recipe == ok.recipe
    assert failed.downstream_response["sent"] is False
    assert "No permission" in failed.downstream_response["error"]


def test_store_error_status_keeps_the_recipe(settings, fakes):
    store = fakes.Lambda(payload={"statusCode": 503, "body": "{}"})
    result = asyncio.run(_service(settings, fakes.Bedrock(), store).extract_recipe_from_text("x"))
    assert result.recipe.title == "Salade verte"
    assert result.downstream_response == {"error": result.downstream_response["error"], "sent": False}


def test_blank_text_is_input_error(settings, fakes):
    bedrock = fakes.Bedrock()
    with pytest.raises(InputError):
        asyncio.run(_service(settings, bedrock, fakes.Lambda()).extract_recipe_from_text("   "))
    assert bedrock.calls == []


def test_invalid_recipe_is_not_sent(settings, fakes):
    store = fakes.Lambda()
    bedrock = fakes.Bedrock(fakes.nova({"servings": 2, "ingredients": "flour", "steps": []}))
    with pytest.raises(InvalidRecipeError) as exc:
        asyncio.run(_service(settings, bedrock, store).extract_recipe_from_text("x"))

    assert "Title is required and must be a string" in exc.value.errors
    assert "Ingredients must be an array" in exc.value.errors
    assert store.calls == []


def test_backend_errors_propagate(settings, fakes):
    with pytest.raises(BackendError):
        asyncio.run(_service(settings, fakes.Bedrock(fakes.nova("not json")), fakes.Lambda()).extract_recipe_from_text("x"))


def test_health_check_statuses(settings, fakes):
    healthy = asyncio.run(_service(settings, fakes.Bedrock(), fakes.Lambda()).health_check())
    assert healthy["status"] == "healthy"
    assert healthy["services"] == {"backend": "available", "downstream": "available"}
    assert "timestamp" in healthy

    err = ClientError({"Error": {"Code": "ThrottlingException", "Message": "x"}}, "Invoke")
    degraded = asyncio.run(_service(settings, fakes.Bedrock(), fakes.Lambda(error=err)).health_check())
    assert degraded["status"] == "degraded"
    assert degraded["services"]["downstream"] == "unavailable"


def test_health_check_unhealthy_when_a_check_raises(settings, fakes, monkeypatch):
    service = _service(settings, fakes.Bedrock(), fakes.Lambda())

    async def explode():
        raise RuntimeError("check crashed")

    monkeypatch.setattr(service.extractor, "check_availability", explode)
    report = asyncio.run(service.health_check())
    assert report["status"] == "unhealthy"
    assert report["error"] == "check crashed"
