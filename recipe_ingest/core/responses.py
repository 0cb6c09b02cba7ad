# recipe_ingest/core/responses.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}


def _envelope(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", **CORS_HEADERS},
        "body": json.dumps(payload, ensure_ascii=False, default=str),
    }


def success_response(data: Any, status_code: int = 200) -> Dict[str, Any]:
    return _envelope(status_code, {"success": True, "data": data})


def error_response(
    message: str,
    status_code: int = 400,
    details: Optional[List[str]] = None,
) -> Dict[str, Any]:
    return _envelope(
        status_code,
        {"success": False, "error": {"message": message, "details": list(details or [])}},
    )


def preflight_response() -> Dict[str, Any]:
    return {"statusCode": 200, "headers": dict(PREFLIGHT_HEADERS), "body": ""}
