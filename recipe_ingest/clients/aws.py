from __future__ import annotations

import boto3
from botocore.config import Config

from recipe_ingest.core.config import Settings

# Outbound calls are never retried here; re-delivery belongs to the invoking infrastructure.
_BOTO_CONFIG = Config(retries={"max_attempts": 1, "mode": "standard"})


def make_client(service: str, settings: Settings):
    return boto3.client(service, region_name=settings.region, config=_BOTO_CONFIG)
