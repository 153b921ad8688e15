"""Ticket wire format (camelCase JSON) and derived values."""
from __future__ import annotations

import unittest
from datetime import date

from servicelog.models.ticket import SparesDetails, Ticket
from servicelog.models.ticket_enums import CustomerRating, RequestType, TicketStatus

WIRE = {
    "_id": "65f0c2",
    "ticketNumber": "SL-0042",
    "requestDate": "2024-05-01T00:00:00.000Z",
    "basicDetails": {"customerName": "Acme", "productName": "P110", "productSerial": "SN-1"},
    "supportDetails": {"requestType": ["Warranty", "Demo", "Bogus", "Demo"], "requestMode": "Phone"},
    "sparesDetails": {"serviceCharge": "150", "anyOtherCharges": 25.5, "testCardAttached": True},
    "briefDescription": "Replaced ribbon",
    "engineerFeedback": {"engineerName": "Ravi", "status": "Completed", "engineerSignature": "data:image/png;base64,AAAA"},
    "customerFeedback": {"rating": "Good", "signature": ""},
}


class TestTicketFromDict(unittest.TestCase):
    def test_fields_are_mapped(self) -> None:
        t = Ticket.from_dict(WIRE)
        self.assertEqual(t.id, "65f0c2")
        self.assertEqual(t.ticket_number, "SL-0042")
        self.assertEqual(t.request_date, date(2024, 5, 1))
        self.assertEqual(t.basic_details.customer_name, "Acme")
        self.assertEqual(t.support_details.request_type, [RequestType.WARRANTY, RequestType.DEMO])
        self.assertTrue(t.spares_details.test_card_attached)
        self.assertEqual(t.status, TicketStatus.COMPLETED)
        self.assertFalse(t.engineer_feedback.engineer_signature.is_empty)
        self.assertEqual(t.customer_feedback.rating, CustomerRating.GOOD)
        self.assertTrue(t.customer_feedback.signature.is_empty)

    def test_missing_sections_default_to_empty_records(self) -> None:
        t = Ticket.from_dict({"_id": "x", "ticketNumber": "1"})
        self.assertEqual(t.basic_details.customer_name, "")
        self.assertEqual(t.support_details.request_type, [])
        self.assertEqual(t.status, TicketStatus.PENDING)
        self.assertIsNone(t.customer_feedback.rating)
        self.assertIsNone(t.request_date)


class TestTicketToDict(unittest.TestCase):
    def test_camel_case_body(self) -> None:
        body = Ticket.from_dict(WIRE).to_dict()
        self.assertEqual(body["_id"], "65f0c2")
        self.assertEqual(body["requestDate"], "2024-05-01")
        self.assertEqual(body["supportDetails"]["requestType"], ["Warranty", "Demo"])
        self.assertEqual(body["sparesDetails"]["serviceCharge"], 150)
        self.assertEqual(body["sparesDetails"]["anyOtherCharges"], 25.5)
        self.assertEqual(body["engineerFeedback"]["status"], "Completed")
        self.assertEqual(body["customerFeedback"]["rating"], "Good")
        self.assertEqual(body["customerFeedback"]["signature"], "")

    def test_new_ticket_has_no_id(self) -> None:
        body = Ticket.new(date(2024, 1, 2)).to_dict()
        self.assertNotIn("_id", body)
        self.assertEqual(body["requestDate"], "2024-01-02")
        self.assertEqual(body["engineerFeedback"]["status"], "Pending")
        self.assertEqual(body["customerFeedback"]["rating"], "")


class TestCharges(unittest.TestCase):
    def test_total_ignores_non_numeric(self) -> None:
        self.assertEqual(SparesDetails(service_charge="100", any_other_charges="abc").total_charges, 100.0)
        self.assertEqual(SparesDetails(service_charge="", any_other_charges=12.5).total_charges, 12.5)
        self.assertEqual(SparesDetails().total_charges, 0.0)

    def test_non_numeric_charge_is_sent_as_entered(self) -> None:
        self.assertEqual(SparesDetails(service_charge="tbd").to_dict()["serviceCharge"], "tbd")
        self.assertEqual(SparesDetails(service_charge=" ").to_dict()["serviceCharge"], 0)

    def test_toggle_request_type(self) -> None:
        t = Ticket()
        self.assertTrue(t.support_details.toggle(RequestType.CHARGEABLE))
        self.assertFalse(t.support_details.toggle(RequestType.CHARGEABLE))
        self.assertEqual(t.support_details.request_type, [])


if __name__ == "__main__":
    unittest.main()
