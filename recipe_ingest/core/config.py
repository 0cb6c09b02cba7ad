from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

# --- Fixed contract values ---
MAX_TEXT_LENGTH = 50000
SUPPORTED_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png")

FETCH_TIMEOUT_S = 10.0
MAX_REDIRECTS = 5
USER_AGENT = "Mozilla/5.0 (compatible; RecipeKeeperBot/1.0)"
FETCH_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
}

DEFAULT_MODEL_ID = "amazon.nova-lite-v1:0"
MAX_TOKENS = 4096
TEMPERATURE = 0.2
SMOKE_TEST_TEXT = "Test recipe: pasta with tomato sauce"

DOWNSTREAM_FUNCTION_PREFIX = "recipekeeper-api"

SYSTEM_PROMPT = """You are a recipe extractor. Return ONLY valid JSON, with no text around it.

Schema:
{ "title": string, "servings": number, "ingredients": [{"name": string, "quantity": number, "unit": string}], "steps": [{"order": number, "text": string}], "tags": [string] }

Constraints:
- servings: if absent -> 4
- ingredients: quantity is numeric (if unknown -> 1), unit in lower case
- steps: order starts at 1
"""


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


class Settings(BaseModel):
    """Read-only configuration, built once per process and handed to every service."""

    model_config = ConfigDict(frozen=True)

    region: str = "us-east-1"
    model_id: str = DEFAULT_MODEL_ID
    environment: str = "preprod"
    recipe_store_function: Optional[str] = None
    textract_sns_topic_arn: Optional[str] = None
    textract_role_arn: Optional[str] = None
    use_sync_textract: bool = False

    # --- Version / build metadata ---
    app_version: str = "1.0.0"
    git_sha: str = "unknown"
    build_date: str = "unknown"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            region=env.get("AWS_REGION") or "us-east-1",
            model_id=env.get("BEDROCK_MODEL_ID") or DEFAULT_MODEL_ID,
            environment=env.get("ENVIRONMENT") or "preprod",
            recipe_store_function=env.get("RECIPE_STORE_FUNCTION") or None,
            textract_sns_topic_arn=env.get("TEXTRACT_SNS_TOPIC_ARN") or None,
            textract_role_arn=env.get("TEXTRACT_ROLE_ARN") or None,
            use_sync_textract=_env_flag(env.get("USE_SYNC_TEXTRACT")),
            app_version=env.get("APP_VERSION", "1.0.0"),
            git_sha=env.get("GIT_SHA", "unknown"),
            build_date=env.get("BUILD_DATE", "unknown"),
        )

    @property
    def downstream_function_name(self) -> str:
        return self.recipe_store_function or f"{DOWNSTREAM_FUNCTION_PREFIX}-{self.environment}"

    @property
    def async_ocr_configured(self) -> bool:
        return bool(self.textract_sns_topic_arn and self.textract_role_arn)
