"""HTTP client for the Finance Tracker API.

Wraps a ``requests.Session`` and translates HTTP failures into the shared error taxonomy: 400 becomes ValidationError, 404 becomes NotFoundError, and everything else (unreachable server, timeouts, 5xx, unreadable bodies) becomes TransportError. No call is ever retried.
"""

from http import HTTPStatus
from typing import Any

import requests

from app.core.errors import NotFoundError, TransportError, ValidationError
from app.core.settings import Settings
from app.core.utils import get_logger

logger = get_logger("finance-tracker.client")

TRANSACTIONS_PATH = "/api/transactions"


class FinanceClient:
    """Thin client for the transaction endpoints."""

    def __init__(self, base_url: str, session: Any = None, timeout: float = 10.0) -> None:
        """Initialize the client; ``session`` defaults to a fresh ``requests.Session``."""
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, session: Any = None) -> "FinanceClient":
        """Build a client from the configured API base URL and timeout."""
        return cls(settings.api_base_url, session=session, timeout=settings.request_timeout)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning(f"{method} {url} failed: {exc}")
            msg = f"Could not reach the Finance Tracker API at {self.base_url}"
            raise TransportError(msg) from exc

        status = response.status_code
        if status >= HTTPStatus.BAD_REQUEST:
            message = _error_message(response)
            logger.warning(f"{method} {url} -> {status}: {message}")
            if status == HTTPStatus.BAD_REQUEST:
                raise ValidationError(message)
            if status == HTTPStatus.NOT_FOUND:
                raise NotFoundError(message)
            raise TransportError(message)
        try:
            return response.json()
        except ValueError as exc:
            msg = f"Unreadable response from {method} {url}"
            raise TransportError(msg) from exc

    def health(self) -> dict[str, Any]:
        """Return the service health payload."""
        return self._request("GET", "/api/health")

    def list(self) -> list[dict[str, Any]]:
        """Fetch every transaction, newest first."""
        return self._request("GET", TRANSACTIONS_PATH)

    def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a transaction and return the stored record."""
        return self._request("POST", TRANSACTIONS_PATH, json=payload)

    def update(self, transaction_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Update a transaction and return the stored record."""
        return self._request("PATCH", f"{TRANSACTIONS_PATH}/{transaction_id}", json=payload)

    def delete(self, transaction_id: str) -> None:
        """Delete a transaction."""
        self._request("DELETE", f"{TRANSACTIONS_PATH}/{transaction_id}")


def _error_message(response: Any) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Request failed with status {response.status_code}"
