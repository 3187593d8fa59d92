"""Excalidraw Canvas Server API client.

Every call issues exactly one request and checks the server's
``{"success": true, ...}`` envelope. Nothing is retried.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

import requests

from canvas_tools.common.config import DEFAULT_SERVER_URL

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

# Marks a request without a body; JSON null is a valid payload
_NO_BODY = object()


class CanvasAPIError(Exception):
    """The server answered, but not with a successful envelope."""

    def __init__(self, message: str, status_code: int = None, reason: str = None,
                 error: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.error = error


def build_url(base_url: str, path: str) -> str:
    """Join base URL and endpoint path, dropping one trailing slash from the base."""
    if base_url.endswith('/'):
        base_url = base_url[:-1]
    return f"{base_url}{path}"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2024-01-01T12:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_envelope(resp: requests.Response) -> Optional[Any]:
    """Parse the response body as JSON, or None if it isn't JSON."""
    try:
        return resp.json()
    except ValueError:
        return None


def check_envelope(resp: requests.Response, action: str) -> dict:
    """Return the parsed envelope, or raise CanvasAPIError.

    A response only counts as successful when the HTTP status is 2xx and the
    body is a JSON object whose ``success`` field is exactly ``True``.
    """
    body = parse_envelope(resp)
    if resp.ok and isinstance(body, dict) and body.get("success") is True:
        return body

    error = body.get("error") if isinstance(body, dict) else None
    message = f"Failed to {action}: {resp.status_code} {resp.reason}"
    if error:
        message += f" - {error}"
    raise CanvasAPIError(message, status_code=resp.status_code, reason=resp.reason, error=error)


class ExcalidrawAPI:
    """Client for the Excalidraw Canvas Server REST API."""

    def __init__(self, base_url: str = DEFAULT_SERVER_URL):
        self.base_url = base_url

    def _request(self, method: str, path: str, payload: Any = _NO_BODY) -> requests.Response:
        url = build_url(self.base_url, path)
        logger.debug(f"{method} {url}")
        if payload is _NO_BODY:
            return requests.request(method, url)
        if payload is None:
            # requests drops json=None, so the null literal goes out as data
            return requests.request(method, url, data=b"null", headers=JSON_HEADERS)
        return requests.request(method, url, json=payload, headers=JSON_HEADERS)

    def health(self) -> str:
        """Check server health. Returns the raw response body."""
        resp = self._request("GET", "/health")
        if not resp.ok:
            raise CanvasAPIError(resp.text, status_code=resp.status_code, reason=resp.reason)
        return resp.text

    def get_elements(self) -> list[dict]:
        """Get all elements on the canvas."""
        resp = self._request("GET", "/api/elements")
        data = check_envelope(resp, "export elements")
        return data.get("elements") or []

    def create_element(self, element: Any) -> Any:
        """Create a single element. Returns the element as stored by the server."""
        resp = self._request("POST", "/api/elements", element)
        return check_envelope(resp, "create element").get("element")

    def create_elements(self, elements: list) -> dict:
        """Append elements to the canvas (batch). Returns the response envelope."""
        resp = self._request("POST", "/api/elements/batch", {"elements": elements})
        return check_envelope(resp, "import elements")

    def sync_elements(self, elements: list) -> dict:
        """Replace every element on the canvas. Returns the response envelope."""
        body = {"elements": elements, "timestamp": utc_timestamp()}
        resp = self._request("POST", "/api/elements/sync", body)
        return check_envelope(resp, "import elements")

    def update_element(self, element_id: str, updates: Any) -> Any:
        """Update a single element by ID (merge update)."""
        resp = self._request("PUT", f"/api/elements/{quote(element_id, safe='')}", updates)
        return check_envelope(resp, "update element").get("element")

    def delete_element(self, element_id: str) -> bool:
        """Delete a single element by ID."""
        resp = self._request("DELETE", f"/api/elements/{quote(element_id, safe='')}")
        check_envelope(resp, "delete element")
        return True

    def clear(self) -> int:
        """Clear all elements from the canvas. Returns count deleted."""
        resp = self._request("DELETE", "/api/elements/clear")
        data = check_envelope(resp, "clear canvas")
        return data.get("count") or 0


def get_client(base_url: Optional[str] = None) -> ExcalidrawAPI:
    """Get an API client instance."""
    return ExcalidrawAPI(DEFAULT_SERVER_URL if base_url is None else base_url)
