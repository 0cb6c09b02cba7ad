# recipe_ingest/services/textract.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List

from botocore.exceptions import BotoCoreError, ClientError

from recipe_ingest.core.errors import JobFailedError, JobNotReadyError, OcrError

log = logging.getLogger(__name__)


def _line_texts(blocks: Iterable[Dict[str, Any]]) -> List[str]:
    return [b.get("Text") or "" for b in blocks or [] if b.get("BlockType") == "LINE"]


def _s3_object(bucket: str, key: str) -> Dict[str, Any]:
    return {"S3Object": {"Bucket": bucket, "Name": key}}


class TextractService:
    """
    Thin wrapper over Textract document text detection.
    No polling loop lives here: results are only fetched once the completion
    notification has arrived.
    """

    def __init__(self, client: Any):
        self.client = client

    def _start(self, bucket: str, key: str, sns_topic_arn: str, role_arn: str) -> Dict[str, Any]:
        try:
            response = self.client.start_document_text_detection(
                DocumentLocation=_s3_object(bucket, key),
                NotificationChannel={"SNSTopicArn": sns_topic_arn, "RoleArn": role_arn},
            )
        except (ClientError, BotoCoreError) as e:
            raise OcrError(f"Failed to start Textract: {e}") from e
        return {"jobId": response["JobId"], "status": "STARTED"}

    def _collect(self, job_id: str) -> str:
        lines: List[str] = []
        next_token = None
        while True:
            kwargs: Dict[str, Any] = {"JobId": job_id}
            if next_token:
                kwargs["NextToken"] = next_token
            try:
                response = self.client.get_document_text_detection(**kwargs)
            except (ClientError, BotoCoreError) as e:
                raise OcrError(f"Failed to get Textract results: {e}") from e

            status = response.get("JobStatus")
            if status == "FAILED":
                raise JobFailedError(response.get("StatusMessage"))
            if status != "SUCCEEDED":
                raise JobNotReadyError(status)

            lines.extend(_line_texts(response.get("Blocks")))

            next_token = response.get("NextToken")
            if not next_token:
                break
        return "\n".join(lines)

    def _detect(self, bucket: str, key: str) -> str:
        try:
            response = self.client.detect_document_text(Document=_s3_object(bucket, key))
        except (ClientError, BotoCoreError) as e:
            raise OcrError(f"Failed to extract text (sync): {e}") from e
        return "\n".join(_line_texts(response.get("Blocks")))

    async def start_text_extraction(
        self, bucket: str, key: str, sns_topic_arn: str, role_arn: str
    ) -> Dict[str, Any]:
        log.info("starting textract job", extra={"bucket": bucket, "key": key})
        result = await asyncio.to_thread(self._start, bucket, key, sns_topic_arn, role_arn)
        log.info("textract job started", extra={"job_id": result["jobId"]})
        return result

    async def get_text_extraction_result(self, job_id: str) -> str:
        log.info("getting textract results", extra={"job_id": job_id})
        text = await asyncio.to_thread(self._collect, job_id)
        log.info("textract text collected", extra={"job_id": job_id, "text_length": len(text)})
        return text

    async def detect_document_text_sync(self, bucket: str, key: str) -> str:
        log.info("synchronous textract", extra={"bucket": bucket, "key": key})
        text = await asyncio.to_thread(self._detect, bucket, key)
        log.info("textract text collected", extra={"key": key, "text_length": len(text)})
        return text
