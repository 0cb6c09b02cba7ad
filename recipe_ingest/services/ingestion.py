# recipe_ingest/services/ingestion.py
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from recipe_ingest.core.config import MAX_TEXT_LENGTH, Settings
from recipe_ingest.core.errors import (
    BackendError,
    FetchError,
    InputError,
    InvalidRecipeError,
    OcrError,
)
from recipe_ingest.core.responses import error_response, success_response
from recipe_ingest.models.ingestion import IngestionJob, JobStatus, SourceKind
from recipe_ingest.services.extraction import RecipeExtractionService
from recipe_ingest.services.storage import decode_object_key, is_supported_file
from recipe_ingest.services.textract import TextractService
from recipe_ingest.services.webpage import fetch_and_extract_webpage, is_valid_url

log = logging.getLogger(__name__)

PageFetcher = Callable[[str], Awaitable[Dict[str, Any]]]


class EventKind(str, Enum):
    STORAGE_UPLOAD = "storage_upload"
    JOB_COMPLETION = "job_completion"
    DIRECT_REQUEST = "direct_request"


def classify_event(event: Any) -> EventKind:
    """
    Batches are recognised by their first record's eventSource; anything else is a direct request.
    Lambda never mixes sources in one batch, so the first record speaks for all of them.
    """
    records = event.get("Records") if isinstance(event, dict) else None
    if isinstance(records, list) and records and isinstance(records[0], dict):
        source = records[0].get("eventSource")
        if source == "aws:sqs":
            return EventKind.JOB_COMPLETION
        if source == "aws:s3":
            return EventKind.STORAGE_UPLOAD
    return EventKind.DIRECT_REQUEST


def _parse_body(event: Dict[str, Any]) -> Any:
    body = event.get("body")
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, str):
        if not body.strip():
            return {}
        return json.loads(body)
    return body


def _failure_details(exc: Exception) -> List[str]:
    if isinstance(exc, InvalidRecipeError):
        return exc.errors
    return [str(exc)]


class EventRouter:
    def __init__(
        self,
        settings: Settings,
        extraction: RecipeExtractionService,
        textract: TextractService,
        fetch_page: PageFetcher = fetch_and_extract_webpage,
    ):
        self.settings = settings
        self.extraction = extraction
        self.textract = textract
        self.fetch_page = fetch_page

    async def route(self, event: Any) -> Dict[str, Any]:
        kind = classify_event(event)
        log.info("event received", extra={"event_kind": kind.value})
        try:
            if kind is EventKind.JOB_COMPLETION:
                return await self.handle_job_completion_event(event)
            if kind is EventKind.STORAGE_UPLOAD:
                return await self.handle_storage_event(event)
            return await self.handle_direct_request(event if isinstance(event, dict) else {})
        except Exception as e:
            log.exception("unhandled error while routing event")
            return error_response("Internal server error", 500, [str(e)])

    # --- S3 uploads ---

    async def handle_storage_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        sync_mode = self.settings.use_sync_textract
        log.info("processing storage event", extra={"textract_mode": "synchronous" if sync_mode else "asynchronous"})

        if not sync_mode and not self.settings.async_ocr_configured:
            return error_response(
                "Missing Textract configuration",
                500,
                ["TEXTRACT_SNS_TOPIC_ARN and TEXTRACT_ROLE_ARN must be set for async mode"],
            )

        results = []
        for record in event["Records"]:
            job = await self._process_upload(record, sync_mode)
            results.append(job.summary())

        return success_response({"message": "S3 event processed", "results": results}, 202)

    async def _process_upload(self, record: Dict[str, Any], sync_mode: bool) -> IngestionJob:
        bucket: Optional[str] = None
        key: Optional[str] = None
        try:
            bucket = record["s3"]["bucket"]["name"]
            key = decode_object_key(record["s3"]["object"]["key"])

            if not is_supported_file(key):
                log.info("skipping unsupported file", extra={"bucket": bucket, "key": key})
                return IngestionJob(
                    bucket=bucket, key=key, status=JobStatus.SKIPPED.value, reason="Unsupported file type"
                )

            if sync_mode:
                text = await self.textract.detect_document_text_sync(bucket, key)
                if not text.strip():
                    raise OcrError("No text extracted from document")
                result = await self.extraction.extract_recipe_from_text(text)
                return IngestionJob(
                    bucket=bucket,
                    key=key,
                    status=JobStatus.COMPLETED.value,
                    mode="synchronous",
                    recipe=result.recipe,
                    downstream_response=result.downstream_response,
                )

            started = await self.textract.start_text_extraction(
                bucket, key, self.settings.textract_sns_topic_arn, self.settings.textract_role_arn
            )
            return IngestionJob(
                bucket=bucket,
                key=key,
                status=JobStatus.PROCESSING.value,
                mode="asynchronous",
                job_id=started["jobId"],
            )
        except Exception as e:
            log.error("error processing upload", extra={"bucket": bucket, "key": key, "error": str(e)})
            return IngestionJob(bucket=bucket, key=key, status=JobStatus.ERROR.value, error=str(e))

    # --- Textract completions (SNS -> SQS) ---

    async def handle_job_completion_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        log.info("processing job completion event", extra={"record_count": len(event["Records"])})

        results = []
        for record in event["Records"]:
            job = await self._process_completion(record)
            results.append(job.summary())

        return success_response({"message": "SQS event processed", "results": results}, 200)

    async def _process_completion(self, record: Dict[str, Any]) -> IngestionJob:
        job_id: Optional[str] = None
        try:
            envelope = json.loads(record["body"])
            notification = json.loads(envelope["Message"])
            job_id = notification.get("JobId")
            status = notification.get("Status")

            if status != "SUCCEEDED":
                log.info("textract job not successful", extra={"job_id": job_id, "job_status": status})
                return IngestionJob(job_id=job_id, status=str(status), processed=False)

            text = await self.textract.get_text_extraction_result(job_id)
            if not text.strip():
                raise OcrError("No text extracted from document")

            result = await self.extraction.extract_recipe_from_text(text)
            return IngestionJob(
                job_id=job_id,
                status=JobStatus.COMPLETED.value,
                recipe=result.recipe,
                downstream_response=result.downstream_response,
            )
        except Exception as e:
            log.error("error processing completion record", extra={"job_id": job_id, "error": str(e)})
            return IngestionJob(
                job_id=job_id,
                message_id=record.get("messageId") if isinstance(record, dict) else None,
                status=JobStatus.ERROR.value,
                error=str(e),
            )

    # --- API Gateway ---

    async def handle_direct_request(self, event: Dict[str, Any]) -> Dict[str, Any]:
        try:
            body = _parse_body(event)
        except ValueError as e:
            log.warning("invalid request body", extra={"error": str(e)})
            return error_response("Invalid JSON in request body", 400)

        if body is None:
            body = {}
        if not isinstance(body, dict):
            return error_response("Request body must be a JSON object", 400)

        try:
            if body.get("url"):
                return await self._extract_from_url(body["url"])
            if body.get("recipeText"):
                return await self._extract_from_text(body["recipeText"])
            return error_response("Missing required parameter: url or recipeText", 400)
        except InputError as e:
            return error_response(str(e), 400)
        except FetchError as e:
            return error_response("Failed to fetch webpage", 502, [str(e)])
        except BackendError as e:
            return error_response("AI service temporarily unavailable", 503, [str(e)])
        except InvalidRecipeError as e:
            return error_response("Could not extract valid recipe from text", 422, _failure_details(e))
        except Exception as e:
            log.exception("direct request failed")
            return error_response("Internal server error", 500, [str(e)])

    async def _extract_from_url(self, url: Any) -> Dict[str, Any]:
        if isinstance(url, str):
            url = url.strip()
        if not is_valid_url(url):
            return error_response("Invalid URL format", 400)

        log.info("extracting recipe", extra={"source_kind": SourceKind.URL.value, "url": url})
        page = await self.fetch_page(url)

        text = page.get("text") or ""
        if not text.strip():
            return error_response("No text content found at URL", 422)

        to_process = text
        if len(to_process) > MAX_TEXT_LENGTH:
            log.info("truncating webpage text", extra={"text_length": len(text), "limit": MAX_TEXT_LENGTH})
            to_process = to_process[:MAX_TEXT_LENGTH]

        result = await self.extraction.extract_recipe_from_text(to_process)
        return success_response(
            {**result.to_payload(), "sourceUrl": url, "extractedTextLength": len(text)},
            200,
        )

    async def _extract_from_text(self, recipe_text: Any) -> Dict[str, Any]:
        if not isinstance(recipe_text, str):
            return error_response("recipeText must be a string", 400)
        if len(recipe_text) > MAX_TEXT_LENGTH:
            return error_response(f"Recipe text too long (max {MAX_TEXT_LENGTH} characters)", 400)

        log.info("extracting recipe", extra={"source_kind": SourceKind.TEXT.value, "text_length": len(recipe_text)})
        result = await self.extraction.extract_recipe_from_text(recipe_text)
        return success_response(result.to_payload(), 200)
