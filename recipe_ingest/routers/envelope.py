from __future__ import annotations

from typing import Any, Dict

from fastapi import Response


def to_response(envelope: Dict[str, Any]) -> Response:
    headers = {k: str(v) for k, v in (envelope.get("headers") or {}).items() if k.lower() != "content-type"}
    return Response(
        content=envelope.get("body") or "",
        status_code=envelope["statusCode"],
        headers=headers,
        media_type="application/json",
    )
