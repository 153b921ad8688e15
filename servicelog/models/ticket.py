"""
Ticket data model (one service log sheet).

The backend speaks camelCase JSON; the dataclasses use snake_case and convert
with `to_dict` / `from_dict`. Missing sub-records come back as empty records,
so views can always bind to every field.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from core.helpers.date_time_helper import format_request_date, parse_request_date
from signature.models.signature_image import EMPTY_SIGNATURE, SignatureImage

from .ticket_enums import CustomerRating, RequestType, TicketStatus


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _as_number(value: Any) -> float:
    """Numeric value of a charge field; anything non-numeric counts as 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0


def _wire_number(value: Any) -> Any:
    """Charges go out as numbers when they parse, otherwise as entered."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if text == "":
        return 0
    try:
        number = float(text)
    except ValueError:
        return text
    return int(number) if number.is_integer() else number


def _charge(data: Dict[str, Any], key: str) -> Any:
    value = data.get(key)
    return 0 if value is None else value


def _signature(data: Dict[str, Any], key: str) -> SignatureImage:
    value = data.get(key)
    return SignatureImage(str(value)) if value else EMPTY_SIGNATURE


@dataclass
class BasicDetails:
    ticket_id: str = ""
    customer_name: str = ""
    service_location: str = ""
    product_name: str = ""
    product_serial: str = ""
    problem_description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticketId": self.ticket_id,
            "customerName": self.customer_name,
            "serviceLocation": self.service_location,
            "productName": self.product_name,
            "productSerial": self.product_serial,
            "problemDescription": self.problem_description,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BasicDetails":
        data = data or {}
        return cls(
            ticket_id=_text(data, "ticketId"),
            customer_name=_text(data, "customerName"),
            service_location=_text(data, "serviceLocation"),
            product_name=_text(data, "productName"),
            product_serial=_text(data, "productSerial"),
            problem_description=_text(data, "problemDescription"),
        )


@dataclass
class SupportDetails:
    request_type: List[RequestType] = field(default_factory=list)
    request_mode: str = ""
    received_by: str = ""
    customer_contact: str = ""
    reseller_name: str = ""

    def toggle(self, request_type: RequestType) -> bool:
        """Flip one request type; returns whether it is selected afterwards."""
        if request_type in self.request_type:
            self.request_type.remove(request_type)
            return False
        self.request_type.append(request_type)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestType": [rt.value for rt in self.request_type],
            "requestMode": self.request_mode,
            "receivedBy": self.received_by,
            "customerContact": self.customer_contact,
            "resellerName": self.reseller_name,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SupportDetails":
        data = data or {}
        types: List[RequestType] = []
        for raw in data.get("requestType") or []:
            try:
                rt = RequestType(raw)
            except ValueError:
                continue
            if rt not in types:
                types.append(rt)
        return cls(
            request_type=types,
            request_mode=_text(data, "requestMode"),
            received_by=_text(data, "receivedBy"),
            customer_contact=_text(data, "customerContact"),
            reseller_name=_text(data, "resellerName"),
        )


@dataclass
class SparesDetails:
    """
    Spare parts and charges. Charge fields keep what the technician typed;
    `total_charges` treats anything non-numeric as 0.
    """
    replaced_spare: str = ""
    replaced_spare_sl_no: str = ""
    damaged_old_spare: str = ""
    damaged_old_spare_sl_no: str = ""
    test_card_attached: bool = False
    printing_counter: str = ""
    service_charge: Any = 0
    any_other_charges: Any = 0
    charge_description: str = ""

    @property
    def total_charges(self) -> float:
        return _as_number(self.service_charge) + _as_number(self.any_other_charges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "replacedSpare": self.replaced_spare,
            "replacedSpareSlNo": self.replaced_spare_sl_no,
            "damagedOldSpare": self.damaged_old_spare,
            "damagedOldSpareSlNo": self.damaged_old_spare_sl_no,
            "testCardAttached": bool(self.test_card_attached),
            "printingCounter": self.printing_counter,
            "serviceCharge": _wire_number(self.service_charge),
            "anyOtherCharges": _wire_number(self.any_other_charges),
            "chargeDescription": self.charge_description,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SparesDetails":
        data = data or {}
        return cls(
            replaced_spare=_text(data, "replacedSpare"),
            replaced_spare_sl_no=_text(data, "replacedSpareSlNo"),
            damaged_old_spare=_text(data, "damagedOldSpare"),
            damaged_old_spare_sl_no=_text(data, "damagedOldSpareSlNo"),
            test_card_attached=bool(data.get("testCardAttached", False)),
            printing_counter=_text(data, "printingCounter"),
            service_charge=_charge(data, "serviceCharge"),
            any_other_charges=_charge(data, "anyOtherCharges"),
            charge_description=_text(data, "chargeDescription"),
        )


@dataclass
class EngineerFeedback:
    engineer_name: str = ""
    time_spent: str = ""
    status: TicketStatus = TicketStatus.PENDING
    engineer_signature: SignatureImage = EMPTY_SIGNATURE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engineerName": self.engineer_name,
            "timeSpent": self.time_spent,
            "status": self.status.value,
            "engineerSignature": self.engineer_signature.data_url,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineerFeedback":
        data = data or {}
        return cls(
            engineer_name=_text(data, "engineerName"),
            time_spent=_text(data, "timeSpent"),
            status=TicketStatus.parse(data.get("status")),
            engineer_signature=_signature(data, "engineerSignature"),
        )


@dataclass
class CustomerFeedback:
    rating: Optional[CustomerRating] = None
    representative_name: str = ""
    signature: SignatureImage = EMPTY_SIGNATURE
    contact_no: str = ""
    email: str = ""
    remarks: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rating": self.rating.value if self.rating else "",
            "representativeName": self.representative_name,
            "signature": self.signature.data_url,
            "contactNo": self.contact_no,
            "email": self.email,
            "remarks": self.remarks,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CustomerFeedback":
        data = data or {}
        return cls(
            rating=CustomerRating.parse(data.get("rating")),
            representative_name=_text(data, "representativeName"),
            signature=_signature(data, "signature"),
            contact_no=_text(data, "contactNo"),
            email=_text(data, "email"),
            remarks=_text(data, "remarks"),
        )


@dataclass
class Ticket:
    """
    One service ticket.

    Attributes:
        id (str | None): Backend id (``_id``); None until the ticket was created.
        ticket_number (str): Human sequence number shown on the sheet.
        request_date (date | None): Calendar date of the request.
    """
    id: Optional[str] = None
    ticket_number: str = ""
    request_date: Optional[date] = None
    basic_details: BasicDetails = field(default_factory=BasicDetails)
    support_details: SupportDetails = field(default_factory=SupportDetails)
    spares_details: SparesDetails = field(default_factory=SparesDetails)
    brief_description: str = ""
    engineer_feedback: EngineerFeedback = field(default_factory=EngineerFeedback)
    customer_feedback: CustomerFeedback = field(default_factory=CustomerFeedback)

    @classmethod
    def new(cls, today: Optional[date] = None) -> "Ticket":
        """Blank sheet dated today."""
        return cls(request_date=today or date.today())

    @property
    def status(self) -> TicketStatus:
        return self.engineer_feedback.status

    def to_dict(self) -> Dict[str, Any]:
        """Request body for create/update; ``_id`` only when known."""
        data: Dict[str, Any] = {
            "ticketNumber": self.ticket_number,
            "requestDate": format_request_date(self.request_date),
            "basicDetails": self.basic_details.to_dict(),
            "supportDetails": self.support_details.to_dict(),
            "sparesDetails": self.spares_details.to_dict(),
            "briefDescription": self.brief_description,
            "engineerFeedback": self.engineer_feedback.to_dict(),
            "customerFeedback": self.customer_feedback.to_dict(),
        }
        if self.id:
            data["_id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ticket":
        raw_id = data.get("_id")
        return cls(
            id=str(raw_id) if raw_id else None,
            ticket_number=_text(data, "ticketNumber"),
            request_date=parse_request_date(data.get("requestDate")),
            basic_details=BasicDetails.from_dict(data.get("basicDetails")),
            support_details=SupportDetails.from_dict(data.get("supportDetails")),
            spares_details=SparesDetails.from_dict(data.get("sparesDetails")),
            brief_description=_text(data, "briefDescription"),
            engineer_feedback=EngineerFeedback.from_dict(data.get("engineerFeedback")),
            customer_feedback=CustomerFeedback.from_dict(data.get("customerFeedback")),
        )


@dataclass
class DashboardStats:
    total: int = 0
    pending: int = 0
    completed: int = 0
