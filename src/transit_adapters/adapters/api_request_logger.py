"""Logging of outgoing backend requests when TA_LOG_REQUESTS is enabled."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
# Request signatures would let a reader replay the request.
_SENSITIVE_PARAMS = {"checksum", "mic", "mac"}


def should_log_requests() -> bool:
    """Check if request logging is enabled via the TA_LOG_REQUESTS environment variable."""
    return os.getenv("TA_LOG_REQUESTS", "").lower() == "true"


def _redact_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return params
    return {k: REDACTED if k.lower() in _SENSITIVE_PARAMS else v for k, v in params.items()}


def _build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Build full URL with query parameters."""
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return f"{url}?{param_str}" if "?" not in url else f"{url}&{param_str}"


def _redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    return {k: REDACTED if k.lower() in _SENSITIVE_HEADERS else v for k, v in headers.items()}


def _redact_payload(payload: Any) -> Any:
    """Replace the HAFAS ``auth`` block, parsing JSON text payloads first."""
    if isinstance(payload, str):
        try:
            decoded = json.loads(payload)
        except ValueError:
            return payload
        if not isinstance(decoded, dict):
            return payload
        payload = decoded
    if isinstance(payload, dict) and "auth" in payload:
        return {**payload, "auth": REDACTED}
    return payload


def _format_payload(payload: Any) -> str:
    """Format payload for logging."""
    try:
        return json.dumps(payload, indent=2) if isinstance(payload, dict) else str(payload)
    except (TypeError, ValueError):
        return str(payload)


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    payload: Any = None,
) -> None:
    """Log API request details if TA_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        params: Query parameters; signing parameters are redacted.
        headers: Request headers; sensitive headers are redacted.
        payload: Request body as dict or JSON text; the auth block is redacted.
    """
    if not should_log_requests():
        return

    full_url = _build_url_with_params(url, _redact_params(params))
    log_parts = [f"{method} {full_url}"]

    if headers:
        safe_headers = _redact_sensitive_headers(headers)
        log_parts.append(f"Headers: {json.dumps(safe_headers, indent=2)}")

    if payload is not None:
        log_parts.append(f"Payload: {_format_payload(_redact_payload(payload))}")

    logger.info("API Request:\n" + "\n".join(log_parts))
