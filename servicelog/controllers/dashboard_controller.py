"""DashboardController - ticket list, search, statistics and delete."""

from __future__ import annotations
from typing import Any, Callable, List, Optional, Protocol, Sequence

from servicelog.exceptions.errors import TicketStoreError
from servicelog.logic.dashboard_service import DashboardRow, compute_stats, filter_tickets, to_row
from servicelog.logic.ticket_store import TicketStore
from servicelog.models.ticket import DashboardStats, Ticket

_FEATURE_ID = "servicelog"

CONFIRM_DELETE = "Are you sure you want to delete this service log?"


class DashboardView(Protocol):
    def show_rows(self, rows: Sequence[DashboardRow], stats: DashboardStats) -> None: ...

    def show_error(self, message: str) -> None: ...

    def confirm(self, message: str) -> bool: ...


class DashboardController:
    """
    Keeps the loaded ticket list and the current search term.

    Responsibilities:
    - Load tickets from the store (failures leave the list unchanged)
    - Filter by search term, compute stats over all tickets
    - Delete after confirmation
    - Navigate to a ticket / to a new ticket
    """

    def __init__(
            self,
            *,
            store: TicketStore,
            view: DashboardView,
            on_open: Optional[Callable[[str], None]] = None,
            on_new: Optional[Callable[[], None]] = None,
            logger: Optional[Any] = None,
    ) -> None:
        self._store = store
        self._view = view
        self._on_open = on_open
        self._on_new = on_new
        self._logger = logger
        self._tickets: List[Ticket] = []
        self._term = ""

    @property
    def tickets(self) -> List[Ticket]:
        return list(self._tickets)

    @property
    def search_term(self) -> str:
        return self._term

    def load(self) -> bool:
        """
        Fetch all tickets and refresh the view.

        Returns:
            True on success; on failure the view shows an error.
        """
        try:
            self._tickets = self._store.list()
        except TicketStoreError as exc:
            self._view.show_error(f"Error fetching logs: {exc}")
            self._refresh()
            return False
        self._refresh()
        return True

    def search(self, term: str) -> List[Ticket]:
        self._term = term or ""
        return self._refresh()

    def stats(self) -> DashboardStats:
        return compute_stats(self._tickets)

    def delete(self, ticket_id: str) -> bool:
        """Delete one ticket after the user confirmed; removes it locally on success."""
        if not ticket_id or not self._view.confirm(CONFIRM_DELETE):
            return False
        try:
            self._store.delete(ticket_id)
        except TicketStoreError:
            self._view.show_error("Failed to delete log")
            return False
        self._tickets = [t for t in self._tickets if t.id != ticket_id]
        self._log("ticket_deleted", ticket_id)
        self._refresh()
        return True

    def open_ticket(self, ticket_id: str) -> None:
        if ticket_id and self._on_open is not None:
            self._on_open(ticket_id)

    def new_ticket(self) -> None:
        if self._on_new is not None:
            self._on_new()

    # --- Internal helpers ---------------------------------------------------

    def _refresh(self) -> List[Ticket]:
        visible = filter_tickets(self._tickets, self._term)
        self._view.show_rows([to_row(t) for t in visible], self.stats())
        return visible

    def _log(self, event: str, reference_id: Optional[str] = None) -> None:
        logger = self._logger
        if logger is None:
            from core.logging.logic.logger import get_logger
            logger = get_logger()
        logger.log(_FEATURE_ID, event, reference_id=reference_id)
