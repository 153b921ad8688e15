"""
Ticket Store client.

`TicketStore` is the interface the controllers depend on; `HttpTicketStore`
talks to the REST backend with a `requests.Session`:

    GET    /service-logs                 -> list of tickets
    GET    /service-logs/next-number     -> {"nextNumber": "..."}
    GET    /service-logs/{id}            -> ticket
    POST   /service-logs                 -> created ticket (with _id, ticketNumber)
    PUT    /service-logs/{id}            -> updated ticket
    DELETE /service-logs/{id}

Every failure (transport, timeout, non-2xx, unreadable body) surfaces as
`TicketStoreError`. Requests are never retried.
"""
from __future__ import annotations

from typing import Any, List, Optional, Protocol

import requests

from ..exceptions.errors import TicketStoreError
from ..models.ticket import Ticket

_FEATURE_ID = "servicelog"


def normalize_base_url(url: str) -> str:
    """
    Remote backends are mounted under ``/api``: a configured URL that is not
    localhost and does not already end in ``/api`` gets it appended.
    """
    base = (url or "").strip()
    if base and not base.endswith("/api") and "localhost" not in base:
        base = f"{base}api" if base.endswith("/") else f"{base}/api"
    return base.rstrip("/")


class TicketStore(Protocol):
    def list(self) -> List[Ticket]: ...

    def get(self, ticket_id: str) -> Ticket: ...

    def create(self, ticket: Ticket) -> Ticket: ...

    def update(self, ticket_id: str, ticket: Ticket) -> Ticket: ...

    def delete(self, ticket_id: str) -> None: ...

    def next_sequence_number(self) -> str: ...


class HttpTicketStore:
    """
    REST implementation of the Ticket Store.

    Args:
        base_url: backend root, normalized with `normalize_base_url`.
        timeout: seconds per request.
        session: optional pre-configured session (tests inject one).
        logger: event logger; failures are recorded under feature "servicelog".
    """

    RESOURCE = "service-logs"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        logger: Optional[Any] = None,
    ) -> None:
        self.base_url = normalize_base_url(base_url)
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        self._logger = logger

    @classmethod
    def from_config(cls, config: Any, *, logger: Optional[Any] = None) -> "HttpTicketStore":
        return cls(config.api.base_url, timeout=float(config.api.timeout_seconds), logger=logger)

    # --- Public API ---------------------------------------------------------

    def list(self) -> List[Ticket]:
        data = self._request("GET", self.RESOURCE)
        if not isinstance(data, list):
            raise self._fail("list", "Unexpected response: expected a list of tickets")
        return [Ticket.from_dict(item) for item in data if isinstance(item, dict)]

    def get(self, ticket_id: str) -> Ticket:
        return self._ticket(self._request("GET", f"{self.RESOURCE}/{ticket_id}"), "get")

    def create(self, ticket: Ticket) -> Ticket:
        payload = ticket.to_dict()
        payload.pop("_id", None)
        return self._ticket(self._request("POST", self.RESOURCE, json=payload), "create")

    def update(self, ticket_id: str, ticket: Ticket) -> Ticket:
        data = self._request("PUT", f"{self.RESOURCE}/{ticket_id}", json=ticket.to_dict())
        # some backends answer an update with an empty body
        if data is None:
            return ticket
        return self._ticket(data, "update")

    def delete(self, ticket_id: str) -> None:
        self._request("DELETE", f"{self.RESOURCE}/{ticket_id}")

    def next_sequence_number(self) -> str:
        data = self._request("GET", f"{self.RESOURCE}/next-number")
        if not isinstance(data, dict) or data.get("nextNumber") in (None, ""):
            raise self._fail("next_number", "Unexpected response: nextNumber missing")
        return str(data["nextNumber"])

    def close(self) -> None:
        self._session.close()

    # --- Internal helpers ---------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        op = f"{method} /{path}"
        try:
            response = self._session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise self._fail(op, f"Request timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise self._fail(op, f"Request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise self._fail(
                op,
                f"Server answered {response.status_code}: {self._reason(response)}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise self._fail(op, f"Response is not valid JSON: {exc}", status_code=response.status_code) from exc

    def _ticket(self, data: Any, op: str) -> Ticket:
        if not isinstance(data, dict):
            raise self._fail(op, "Unexpected response: expected a ticket object")
        return Ticket.from_dict(data)

    @staticmethod
    def _reason(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason or ""
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason or ""

    def _fail(self, op: str, message: str, *, status_code: Optional[int] = None) -> TicketStoreError:
        logger = self._logger
        if logger is None:
            from core.logging.logic.logger import get_logger
            logger = get_logger()
        logger.log(_FEATURE_ID, "store_error", level="ERROR", reference_id=op, message=message)
        return TicketStoreError(message, status_code=status_code)
