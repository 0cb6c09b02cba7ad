# recipe_ingest/services/recipe_store.py
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from recipe_ingest.core.config import Settings
from recipe_ingest.core.errors import DownstreamError

log = logging.getLogger(__name__)


def _decode_payload(raw: Any) -> Any:
    if hasattr(raw, "read"):
        raw = raw.read()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {"raw": raw.decode("utf-8", "replace") if isinstance(raw, bytes) else str(raw)}


class RecipeStoreClient:
    """The recipe store is another Lambda speaking the API Gateway proxy format."""

    def __init__(self, settings: Settings, client: Any):
        self.function_name = settings.downstream_function_name
        self.client = client

    def _invoke(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.client.invoke(
                FunctionName=self.function_name,
                InvocationType="RequestResponse",
                Payload=json.dumps(payload).encode("utf-8"),
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "ResourceNotFoundException":
                raise DownstreamError(f"Lambda function {self.function_name} not found. Check ENVIRONMENT.") from e
            if code == "AccessDeniedException":
                raise DownstreamError(f"No permission to invoke Lambda {self.function_name}") from e
            raise DownstreamError(f"Error invoking Lambda {self.function_name}: {e}") from e
        except BotoCoreError as e:
            raise DownstreamError(f"Error invoking Lambda {self.function_name}: {e}") from e

    def _send(self, recipe: Dict[str, Any]) -> Dict[str, Any]:
        response = self._invoke(
            {
                "httpMethod": "POST",
                "path": "/recipes",
                "headers": {"Content-Type": "application/json"},
                "body": json.dumps(recipe, ensure_ascii=False),
            }
        )
        payload = _decode_payload(response.get("Payload"))

        if response.get("FunctionError"):
            raise DownstreamError(f"Lambda execution failed: {json.dumps(payload, default=str)}")

        if not isinstance(payload, dict):
            return {"sent": True, "body": payload}

        parsed = dict(payload)
        if isinstance(parsed.get("body"), str):
            try:
                parsed["body"] = json.loads(parsed["body"])
            except ValueError:
                pass

        status = parsed.get("statusCode")
        if isinstance(status, int) and not 200 <= status < 300:
            raise DownstreamError(f"API returned error status {status}: {json.dumps(parsed.get('body'), default=str)}")

        parsed["sent"] = True
        return parsed

    async def send_recipe(self, recipe: Dict[str, Any]) -> Dict[str, Any]:
        log.info("sending recipe to store", extra={"function_name": self.function_name})
        result = await asyncio.to_thread(self._send, recipe)
        log.info("recipe stored", extra={"function_name": self.function_name, "status_code": result.get("statusCode")})
        return result

    def _probe(self) -> None:
        response = self._invoke({"httpMethod": "GET", "path": "/health", "headers": {}})
        if response.get("FunctionError"):
            raise DownstreamError(f"Lambda {self.function_name} health probe failed")

    async def check_availability(self) -> bool:
        try:
            await asyncio.to_thread(self._probe)
            return True
        except Exception as e:
            log.warning("recipe store availability check failed", extra={"error": str(e)})
            return False
