# recipe_ingest/services/bedrock.py
from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Literal

from botocore.exceptions import BotoCoreError, ClientError

from recipe_ingest.core.config import MAX_TOKENS, SMOKE_TEST_TEXT, SYSTEM_PROMPT, TEMPERATURE, Settings
from recipe_ingest.core.errors import (
    BackendFormatError,
    BackendInvocationError,
    BackendProtocolError,
    InputError,
)
from recipe_ingest.services.normalize import normalize_recipe

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendReply:
    style: Literal["nova", "claude"]
    text: str


def _region_prefix(region: str) -> str:
    for prefix in ("us", "eu", "ap"):
        if region.startswith(f"{prefix}-"):
            return prefix
    return "us"


def resolve_model_id(model_id: str, region: str) -> str:
    """Nova models are only reachable through the regional inference profile."""
    if model_id.startswith("amazon.nova"):
        return f"{_region_prefix(region)}.{model_id}"
    return model_id


def build_request_body(model_id: str, recipe_text: str) -> Dict[str, Any]:
    if "anthropic" in model_id:
        return {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": MAX_TOKENS,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": recipe_text}],
            "temperature": TEMPERATURE,
        }
    return {
        "schemaVersion": "messages-v1",
        "system": [{"text": SYSTEM_PROMPT}],
        "messages": [{"role": "user", "content": [{"text": recipe_text}]}],
        "inferenceConfig": {"max_new_tokens": MAX_TOKENS, "temperature": TEMPERATURE},
    }


def parse_response_envelope(body: Any) -> BackendReply:
    """
    Two reply shapes are accepted, told apart by which top-level field is present:
      - {"output": {"message": {"content": [{"text": ...}]}}}   (Nova / messages-v1)
      - {"content": [{"type": "text", "text": ...}]}             (Anthropic)
    """
    if isinstance(body, dict):
        output = body.get("output")
        if isinstance(output, dict) and isinstance(output.get("message"), dict):
            for item in output["message"].get("content") or []:
                if isinstance(item, dict) and isinstance(item.get("text"), str) and item["text"]:
                    return BackendReply(style="nova", text=item["text"])
        elif isinstance(body.get("content"), list):
            for item in body["content"]:
                if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str) and item["text"]:
                    return BackendReply(style="claude", text=item["text"])

    raise BackendProtocolError("No text content found in Bedrock response")


def _outermost_object(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("{") and text.endswith("}"):
        return text
    m = re.search(r"\{.*\}", text, flags=re.DOTALL)
    if not m:
        raise ValueError("No JSON object found in model output")
    return m.group(0)


def decode_recipe_json(text: str) -> Dict[str, Any]:
    """Parse the model reply, ignoring fences or chatter around the outermost {...}."""
    try:
        payload = json.loads(_outermost_object(text))
    except ValueError as e:
        raise BackendFormatError(f"Failed to parse recipe JSON from Bedrock response: {e}") from e
    if not isinstance(payload, dict):
        raise BackendFormatError("Failed to parse recipe JSON from Bedrock response: not an object")
    return payload


class BedrockRecipeExtractor:
    def __init__(self, settings: Settings, client: Any):
        self.settings = settings
        self.client = client
        self.model_id = resolve_model_id(settings.model_id, settings.region)

    def _invoke(self, body: Dict[str, Any]) -> Any:
        try:
            response = self.client.invoke_model(
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(body),
            )
            raw = response["body"].read()
        except (ClientError, BotoCoreError) as e:
            raise BackendInvocationError(f"AWS Bedrock error: {e}") from e

        try:
            return json.loads(raw)
        except ValueError as e:
            raise BackendProtocolError(f"Bedrock response body is not JSON: {e}") from e

    async def extract_structured_recipe(self, recipe_text: str) -> Dict[str, Any]:
        """Turn free text into a normalized (not yet validated) recipe dict."""
        if not isinstance(recipe_text, str) or not recipe_text.strip():
            raise InputError("Recipe text is required and must be a string")

        log.info("calling bedrock", extra={"model_id": self.model_id, "text_length": len(recipe_text)})
        body = await asyncio.to_thread(self._invoke, build_request_body(self.model_id, recipe_text))

        reply = parse_response_envelope(body)
        log.info("bedrock response received", extra={"reply_style": reply.style})

        return normalize_recipe(decode_recipe_json(reply.text))

    async def check_availability(self) -> bool:
        try:
            await self.extract_structured_recipe(SMOKE_TEST_TEXT)
            return True
        except Exception as e:
            log.warning("bedrock availability check failed", extra={"error": str(e)})
            return False
