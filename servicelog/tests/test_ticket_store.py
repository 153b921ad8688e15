"""HttpTicketStore against a mocked requests.Session."""
from __future__ import annotations

import unittest
from unittest.mock import MagicMock

import requests

from servicelog.exceptions.errors import TicketStoreError
from servicelog.logic.ticket_store import HttpTicketStore, normalize_base_url
from servicelog.models.ticket import Ticket


def _response(status: int = 200, payload=None, *, raw: bytes | None = None) -> MagicMock:
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.reason = "Reason"
    if raw is not None:
        resp.content = raw
        resp.json.side_effect = ValueError("no json")
    elif payload is None:
        resp.content = b""
        resp.json.side_effect = ValueError("empty")
    else:
        resp.content = b"{...}"
        resp.json.return_value = payload
    return resp


class TestNormalizeBaseUrl(unittest.TestCase):
    def test_remote_url_gets_api_suffix(self) -> None:
        self.assertEqual(normalize_base_url("https://logs.example.com"), "https://logs.example.com/api")
        self.assertEqual(normalize_base_url("https://logs.example.com/"), "https://logs.example.com/api")

    def test_existing_suffix_and_localhost_are_kept(self) -> None:
        self.assertEqual(normalize_base_url("https://logs.example.com/api"), "https://logs.example.com/api")
        self.assertEqual(normalize_base_url("http://localhost:5000"), "http://localhost:5000")


class TestHttpTicketStore(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock(spec=requests.Session)
        self.session.headers = {}
        self.logger = MagicMock()
        self.store = HttpTicketStore("https://api.example.com/api", timeout=3,
                                     session=self.session, logger=self.logger)

    def _called(self):
        args, kwargs = self.session.request.call_args
        return args[0], args[1], kwargs

    def test_list(self) -> None:
        self.session.request.return_value = _response(payload=[{"_id": "1", "ticketNumber": "A"}, "junk"])
        tickets = self.store.list()
        self.assertEqual([t.id for t in tickets], ["1"])
        method, url, kwargs = self._called()
        self.assertEqual((method, url), ("GET", "https://api.example.com/api/service-logs"))
        self.assertEqual(kwargs["timeout"], 3)

    def test_get(self) -> None:
        self.session.request.return_value = _response(payload={"_id": "7", "ticketNumber": "SL-7"})
        self.assertEqual(self.store.get("7").ticket_number, "SL-7")
        self.assertEqual(self._called()[1], "https://api.example.com/api/service-logs/7")

    def test_create_posts_without_id(self) -> None:
        self.session.request.return_value = _response(201, {"_id": "new", "ticketNumber": "SL-9"})
        created = self.store.create(Ticket(id="stale", ticket_number=""))
        method, url, kwargs = self._called()
        self.assertEqual(method, "POST")
        self.assertNotIn("_id", kwargs["json"])
        self.assertEqual((created.id, created.ticket_number), ("new", "SL-9"))

    def test_update_puts_ticket(self) -> None:
        self.session.request.return_value = _response(payload={"_id": "5", "ticketNumber": "SL-5"})
        self.store.update("5", Ticket(id="5", ticket_number="SL-5"))
        method, url, kwargs = self._called()
        self.assertEqual((method, url), ("PUT", "https://api.example.com/api/service-logs/5"))
        self.assertEqual(kwargs["json"]["ticketNumber"], "SL-5")

    def test_update_with_empty_body_returns_sent_ticket(self) -> None:
        self.session.request.return_value = _response(204)
        ticket = Ticket(id="5")
        self.assertIs(self.store.update("5", ticket), ticket)

    def test_delete(self) -> None:
        self.session.request.return_value = _response(204)
        self.store.delete("5")
        self.assertEqual(self._called()[:2], ("DELETE", "https://api.example.com/api/service-logs/5"))

    def test_next_sequence_number(self) -> None:
        self.session.request.return_value = _response(payload={"nextNumber": 1043})
        self.assertEqual(self.store.next_sequence_number(), "1043")
        self.assertEqual(self._called()[1], "https://api.example.com/api/service-logs/next-number")

    def test_http_error_carries_status_and_is_logged(self) -> None:
        self.session.request.return_value = _response(404, {"message": "Log not found"})
        with self.assertRaises(TicketStoreError) as ctx:
            self.store.get("missing")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("Log not found", str(ctx.exception))
        args, kwargs = self.logger.log.call_args
        self.assertEqual(args, ("servicelog", "store_error"))
        self.assertEqual(kwargs["level"], "ERROR")

    def test_transport_errors(self) -> None:
        for exc in (requests.ConnectionError("down"), requests.Timeout("slow")):
            self.session.request.side_effect = exc
            with self.assertRaises(TicketStoreError) as ctx:
                self.store.list()
            self.assertIsNone(ctx.exception.status_code)
        self.assertEqual(self.session.request.call_count, 2)

    def test_unreadable_bodies(self) -> None:
        self.session.request.return_value = _response(raw=b"<html>")
        with self.assertRaises(TicketStoreError):
            self.store.list()
        self.session.request.return_value = _response(payload={"not": "a list"})
        with self.assertRaises(TicketStoreError):
            self.store.list()
        self.session.request.return_value = _response(payload={})
        with self.assertRaises(TicketStoreError):
            self.store.next_sequence_number()


if __name__ == "__main__":
    unittest.main()
