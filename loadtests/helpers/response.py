"""Response error extraction for load test observability.

Parses the storefront's JSON envelope into human-readable messages:
``{"success": false, "message": "...", "errors": [{"field", "message", "code"}]}``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        # Not JSON, return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    parts = []
    for error in body.get("errors") or []:
        label = error.get("code") or error.get("field")
        parts.append(f"{label}: {error.get('message')}" if label else str(error.get("message")))
    if parts:
        return " | ".join(parts)

    return str(body.get("message") or body)[:300]


def data(response: Response) -> dict:
    """The ``data`` member of a successful envelope."""
    return response.json().get("data") or {}
