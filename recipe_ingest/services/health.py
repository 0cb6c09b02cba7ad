# recipe_ingest/services/health.py
from __future__ import annotations

from typing import Any, Dict

from recipe_ingest.core.config import Settings

HEALTH_STATUS_CODES = {"healthy": 200, "degraded": 207, "unhealthy": 503}


def health_status_code(report: Dict[str, Any]) -> int:
    return HEALTH_STATUS_CODES.get(report.get("status"), 503)


def version_payload(settings: Settings) -> Dict[str, Any]:
    return {
        "version": settings.app_version,
        "git_sha": settings.git_sha,
        "build_date": settings.build_date,
    }
