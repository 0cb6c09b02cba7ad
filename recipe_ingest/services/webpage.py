# recipe_ingest/services/webpage.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

import httpx

from recipe_ingest.core.config import FETCH_HEADERS, FETCH_TIMEOUT_S, MAX_REDIRECTS
from recipe_ingest.core.errors import (
    FetchNetworkError,
    FetchTimeoutError,
    HttpFetchError,
    TooManyRedirectsError,
)

log = logging.getLogger(__name__)

_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&euro;": "€",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))


def is_valid_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def _get(client: httpx.AsyncClient, url: str, hops: int, max_redirects: int) -> str:
    try:
        r = await client.get(url)
    except httpx.TimeoutException as e:
        raise FetchTimeoutError(f"Request timeout: {url}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchNetworkError(f"Failed to fetch webpage: {e}") from e

    location = r.headers.get("location")
    if 300 <= r.status_code < 400 and location:
        if hops >= max_redirects:
            raise TooManyRedirectsError(f"Failed to fetch webpage: more than {max_redirects} redirects")
        target = urljoin(str(r.url), location)
        log.info("redirect", extra={"from_url": url, "to_url": target})
        return await _get(client, target, hops + 1, max_redirects)

    if r.status_code != 200:
        raise HttpFetchError(r.status_code, r.reason_phrase)

    return r.text


async def fetch_webpage(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    max_redirects: int = MAX_REDIRECTS,
) -> str:
    """GET the page, following at most `max_redirects` 3xx hops by hand."""
    if client is not None:
        return await _get(client, url, 0, max_redirects)

    async with httpx.AsyncClient(
        timeout=FETCH_TIMEOUT_S,
        follow_redirects=False,
        headers=FETCH_HEADERS,
    ) as c:
        return await _get(c, url, 0, max_redirects)


def extract_text_from_html(html: str) -> str:
    """Best-effort markup stripping. Not an HTML parser; odd markup may leave stray characters."""
    text = html or ""

    text = re.sub(r"<script[^>]*>[\s\S]*?</script>", "", text, flags=re.I)
    text = re.sub(r"<style[^>]*>[\s\S]*?</style>", "", text, flags=re.I)
    text = re.sub(r"<noscript[^>]*>[\s\S]*?</noscript>", "", text, flags=re.I)
    text = re.sub(r"<!--[\s\S]*?-->", "", text)

    text = re.sub(r"</(div|p|br|li|tr|h[1-6])[^>]*>", "\n", text, flags=re.I)
    text = re.sub(r"<(br|hr)\b[^>]*>", "\n", text, flags=re.I)

    text = re.sub(r"<[^>]+>", " ", text)

    text = _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)

    text = re.sub(r"\n\s*\n", "\n\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


async def fetch_and_extract_webpage(url: str, *, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    log.info("fetching webpage", extra={"url": url})
    html = await fetch_webpage(url, client=client)
    text = extract_text_from_html(html)
    log.info("webpage text extracted", extra={"url": url, "text_length": len(text)})
    return {"url": url, "html": html, "text": text, "contentLength": len(text)}
