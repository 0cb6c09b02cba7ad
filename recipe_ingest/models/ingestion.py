from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from recipe_ingest.models.recipe import Recipe


class SourceKind(str, Enum):
    TEXT = "TEXT"
    URL = "URL"
    DOCUMENT = "DOCUMENT"


class JobStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    ERROR = "error"
    PROCESSING = "processing"


class IngestionJob(BaseModel):
    """One record of a batch event. Lives only for the duration of the invocation."""

    source_kind: SourceKind = Field(default=SourceKind.DOCUMENT, alias="sourceKind")
    status: str
    bucket: Optional[str] = None
    key: Optional[str] = None
    job_id: Optional[str] = Field(default=None, alias="jobId")
    message_id: Optional[str] = Field(default=None, alias="messageId")
    mode: Optional[str] = None
    processed: Optional[bool] = None
    reason: Optional[str] = None
    error: Optional[str] = None
    recipe: Optional[Recipe] = None
    downstream_response: Optional[Dict[str, Any]] = Field(default=None, alias="downstreamResponse")

    model_config = {"populate_by_name": True}

    def summary(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
