"""
Lambda entry points.

- lambda_handler: API Gateway requests, S3 upload batches, and Textract
  completion batches (SNS -> SQS), told apart by the event's shape.
- health_check:   probes Bedrock and the recipe store.
- options:        CORS preflight.
"""
from __future__ import annotations

import asyncio
import logging

from recipe_ingest.core.logging import setup_logging
from recipe_ingest.core.request_context import set_request_id
from recipe_ingest.core.responses import error_response, preflight_response, success_response
from recipe_ingest.dependencies import get_event_router
from recipe_ingest.services.health import health_status_code

setup_logging()

log = logging.getLogger(__name__)


def _bind_request(context) -> None:
    set_request_id(getattr(context, "aws_request_id", None))


def lambda_handler(event, context):
    _bind_request(context)
    log.info("lambda invoked")
    return asyncio.run(get_event_router().route(event))


def health_check(event, context):
    _bind_request(context)
    log.info("health check invoked")
    try:
        report = asyncio.run(get_event_router().extraction.health_check())
    except Exception as e:
        log.exception("health check failed")
        return error_response("Health check failed", 500, [str(e)])
    return success_response(report, health_status_code(report))


def options(event, context):
    return preflight_response()
