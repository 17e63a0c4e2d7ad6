"""Minimal JSON-over-HTTPS helper shared by the provider clients."""

import json
import urllib.error
import urllib.request
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..domain.errors import ProviderError

USER_AGENT = "group-mirror"
DEFAULT_TIMEOUT = 10


def get_json(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Tuple[Any, Dict[str, str]]:
    """GET ``url`` and return ``(decoded_json, response_headers)``.

    Raises:
        ProviderError: HTTP error, connection failure or invalid JSON.
    """
    request_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    request_headers.update(headers or {})
    req = urllib.request.Request(url, headers=request_headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read().decode("utf-8")
            response_headers = {key.lower(): value for key, value in resp.headers.items()}
    except urllib.error.HTTPError as exc:
        raise ProviderError(_describe_http_error(exc.code, url), status=exc.code) from exc
    except urllib.error.URLError as exc:
        raise ProviderError(f"cannot connect to {url}: {exc.reason}") from exc

    try:
        return json.loads(body), response_headers
    except ValueError as exc:
        raise ProviderError(f"invalid JSON response from {url}: {exc}") from exc


def _describe_http_error(status: int, url: str) -> str:
    if status == 401:
        return f"authentication failed (HTTP 401) for {url}: check your token"
    if status == 403:
        return f"access denied (HTTP 403) for {url}: token scope or rate limit"
    if status == 404:
        return f"not found (HTTP 404): {url}"
    return f"request failed: HTTP {status} for {url}"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 API timestamp; ``None`` when absent or malformed."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
