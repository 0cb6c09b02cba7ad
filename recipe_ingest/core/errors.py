# recipe_ingest/core/errors.py
from __future__ import annotations

from typing import List, Optional


class RecipeIngestError(Exception):
    """Base class for every failure raised by the ingestion services."""


class InputError(RecipeIngestError):
    pass


# --- Bedrock ---

class BackendError(RecipeIngestError):
    pass


class BackendInvocationError(BackendError):
    pass


class BackendProtocolError(BackendError):
    pass


class BackendFormatError(BackendError):
    pass


class InvalidRecipeError(RecipeIngestError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid recipe format: {', '.join(self.errors)}")


# --- Web fetch ---

class FetchError(RecipeIngestError):
    pass


class HttpFetchError(FetchError):
    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}")


class FetchTimeoutError(FetchError):
    pass


class FetchNetworkError(FetchError):
    pass


class TooManyRedirectsError(FetchError):
    pass


# --- Textract ---

class OcrError(RecipeIngestError):
    pass


class JobFailedError(OcrError):
    def __init__(self, status_message: Optional[str]):
        self.status_message = status_message
        super().__init__(f"Textract job failed: {status_message}")


class JobNotReadyError(OcrError):
    def __init__(self, status: Optional[str]):
        self.status = status
        super().__init__(f"Textract job not completed yet. Status: {status}")


# --- Recipe store ---

class DownstreamError(RecipeIngestError):
    pass
