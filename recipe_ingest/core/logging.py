# recipe_ingest/core/logging.py
from __future__ import annotations

import logging
import os
import sys
from pythonjsonlogger import jsonlogger

from recipe_ingest.core.request_context import get_request_id


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = get_request_id()
        return True


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"
    )
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())

    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "botocore", "httpx"):
        lg = logging.getLogger(name)
        lg.handlers = [handler]
        lg.propagate = False

    # botocore logs every request at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
