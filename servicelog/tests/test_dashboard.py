"""Dashboard search/statistics and DashboardController."""
from __future__ import annotations

import unittest
from datetime import date
from unittest.mock import MagicMock

from servicelog.controllers.dashboard_controller import CONFIRM_DELETE, DashboardController
from servicelog.exceptions.errors import TicketStoreError
from servicelog.logic.dashboard_service import compute_stats, filter_tickets, to_row
from servicelog.models.ticket import BasicDetails, EngineerFeedback, Ticket
from servicelog.models.ticket_enums import TicketStatus


def _ticket(tid: str, number: str, customer: str = "", product: str = "", serial: str = "",
            engineer: str = "", status: TicketStatus = TicketStatus.PENDING) -> Ticket:
    return Ticket(
        id=tid,
        ticket_number=number,
        request_date=date(2024, 3, 9),
        basic_details=BasicDetails(customer_name=customer, product_name=product, product_serial=serial),
        engineer_feedback=EngineerFeedback(engineer_name=engineer, status=status),
    )


TICKETS = [
    _ticket("1", "SL-001", customer="Acme Corp", product="P110", serial="AB123", engineer="Ravi"),
    _ticket("2", "SL-002", customer="Globex", product="ZC300", engineer="Meera", status=TicketStatus.COMPLETED),
    _ticket("3", "SL-003", customer="Initech", product="P110", serial="XY999"),
]


class TestFilterTickets(unittest.TestCase):
    def test_blank_term_returns_all(self) -> None:
        self.assertEqual(filter_tickets(TICKETS, "  "), TICKETS)

    def test_case_insensitive_substring_on_each_field(self) -> None:
        self.assertEqual([t.id for t in filter_tickets(TICKETS, "acme")], ["1"])
        self.assertEqual([t.id for t in filter_tickets(TICKETS, "p110")], ["1", "3"])
        self.assertEqual([t.id for t in filter_tickets(TICKETS, "xy9")], ["3"])
        self.assertEqual([t.id for t in filter_tickets(TICKETS, "MEERA")], ["2"])
        self.assertEqual([t.id for t in filter_tickets(TICKETS, "sl-00")], ["1", "2", "3"])
        self.assertEqual(filter_tickets(TICKETS, "nothing"), [])


class TestStatsAndRows(unittest.TestCase):
    def test_stats(self) -> None:
        stats = compute_stats(TICKETS)
        self.assertEqual((stats.total, stats.pending, stats.completed), (3, 2, 1))

    def test_row_defaults(self) -> None:
        row = to_row(TICKETS[1])
        self.assertEqual(row.serial, "N/A")
        self.assertEqual(row.engineer, "Meera")
        self.assertEqual(row.date, "Mar 9, 2024")
        self.assertEqual(to_row(TICKETS[2]).engineer, "Unassigned")
        self.assertEqual(row.as_tuple()[0], "SL-002")


class TestDashboardController(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MagicMock()
        self.store.list.return_value = list(TICKETS)
        self.view = MagicMock()
        self.on_open = MagicMock()
        self.on_new = MagicMock()
        self.ctrl = DashboardController(store=self.store, view=self.view, on_open=self.on_open,
                                        on_new=self.on_new, logger=MagicMock())

    def _shown_ids(self):
        rows, _stats = self.view.show_rows.call_args[0]
        return [r.ticket_id for r in rows]

    def test_load_shows_rows_and_stats(self) -> None:
        self.assertTrue(self.ctrl.load())
        rows, stats = self.view.show_rows.call_args[0]
        self.assertEqual(len(rows), 3)
        self.assertEqual(stats.completed, 1)

    def test_load_failure_keeps_previous_list(self) -> None:
        self.ctrl.load()
        self.store.list.side_effect = TicketStoreError("down")
        self.assertFalse(self.ctrl.load())
        self.view.show_error.assert_called_once()
        self.assertEqual(len(self.ctrl.tickets), 3)

    def test_search_filters_but_stats_cover_everything(self) -> None:
        self.ctrl.load()
        self.ctrl.search("globex")
        rows, stats = self.view.show_rows.call_args[0]
        self.assertEqual([r.ticket_id for r in rows], ["2"])
        self.assertEqual(stats.total, 3)

    def test_delete_requires_confirmation(self) -> None:
        self.ctrl.load()
        self.view.confirm.return_value = False
        self.assertFalse(self.ctrl.delete("1"))
        self.view.confirm.assert_called_once_with(CONFIRM_DELETE)
        self.store.delete.assert_not_called()

    def test_delete_removes_locally(self) -> None:
        self.ctrl.load()
        self.view.confirm.return_value = True
        self.assertTrue(self.ctrl.delete("1"))
        self.store.delete.assert_called_once_with("1")
        self.assertEqual(self._shown_ids(), ["2", "3"])

    def test_delete_failure_keeps_ticket(self) -> None:
        self.ctrl.load()
        self.view.confirm.return_value = True
        self.store.delete.side_effect = TicketStoreError("boom", status_code=500)
        self.assertFalse(self.ctrl.delete("1"))
        self.view.show_error.assert_called_once_with("Failed to delete log")
        self.assertEqual(len(self.ctrl.tickets), 3)

    def test_navigation(self) -> None:
        self.ctrl.open_ticket("2")
        self.on_open.assert_called_once_with("2")
        self.ctrl.new_ticket()
        self.on_new.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
