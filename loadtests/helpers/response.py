"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Handles two response shapes:

- Validation (400): {"error": "validation_error", "messages": {"field": ["msg", ...]}}
- Domain errors (404/409/503): {"error": "code", "message": "..."}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON, return raw text truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body.get("messages"), dict):
        return " | ".join(f"{field}: {'; '.join(map(str, msgs))}" for field, msgs in body["messages"].items())

    if "error" in body:
        message = body.get("message")
        return f"{body['error']}: {message}" if message else str(body["error"])

    # Unknown shape: stringify and truncate
    return str(body)[:300]


def error_code(response: Response) -> str | None:
    """The ``error`` code of a JSON error body, if any."""
    try:
        return response.json().get("error")
    except ValueError:
        return None
