"""Search, statistics and row formatting for the ticket dashboard."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from core.helpers.date_time_helper import format_display_date

from ..models.ticket import DashboardStats, Ticket
from ..models.ticket_enums import TicketStatus


@dataclass(frozen=True)
class DashboardRow:
    """Display values of one ticket in the dashboard table."""
    ticket_id: str
    ticket_number: str
    date: str
    customer: str
    product: str
    serial: str
    engineer: str
    status: str

    def as_tuple(self) -> tuple:
        return (self.ticket_number, self.date, self.customer, self.product,
                self.serial, self.engineer, self.status)


def _search_fields(ticket: Ticket) -> Iterable[str]:
    yield ticket.ticket_number
    yield ticket.basic_details.customer_name
    yield ticket.basic_details.product_name
    yield ticket.basic_details.product_serial
    yield ticket.engineer_feedback.engineer_name


def filter_tickets(tickets: Sequence[Ticket], term: str) -> List[Ticket]:
    """
    Case-insensitive substring search over ticket number, customer, product,
    serial and engineer. A blank term returns every ticket.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(tickets)
    return [t for t in tickets if any(needle in (f or "").lower() for f in _search_fields(t))]


def compute_stats(tickets: Sequence[Ticket]) -> DashboardStats:
    pending = sum(1 for t in tickets if t.status is TicketStatus.PENDING)
    completed = sum(1 for t in tickets if t.status is TicketStatus.COMPLETED)
    return DashboardStats(total=len(tickets), pending=pending, completed=completed)


def to_row(ticket: Ticket) -> DashboardRow:
    return DashboardRow(
        ticket_id=ticket.id or "",
        ticket_number=ticket.ticket_number,
        date=format_display_date(ticket.request_date),
        customer=ticket.basic_details.customer_name,
        product=ticket.basic_details.product_name,
        serial=ticket.basic_details.product_serial or "N/A",
        engineer=ticket.engineer_feedback.engineer_name or "Unassigned",
        status=ticket.status.value,
    )
