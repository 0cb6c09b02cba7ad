from __future__ import annotations

from urllib.parse import unquote_plus

from recipe_ingest.core.config import SUPPORTED_EXTENSIONS


def is_supported_file(key: str) -> bool:
    return (key or "").lower().endswith(SUPPORTED_EXTENSIONS)


def decode_object_key(key: str) -> str:
    # S3 notifications URL-encode keys, with "+" for spaces
    return unquote_plus(key or "")
