"""ServiceLogFormController - state and actions of one service log sheet."""

from __future__ import annotations
from dataclasses import fields
from datetime import date
from typing import Any, Callable, Optional, Protocol

from core.helpers.date_time_helper import parse_request_date
from servicelog.exceptions.errors import TicketStoreError
from servicelog.logic.ticket_store import TicketStore
from servicelog.models.ticket import Ticket
from servicelog.models.ticket_enums import CustomerRating, RequestType, TicketStatus
from signature.models.signature_image import EMPTY_SIGNATURE, SignatureImage

_FEATURE_ID = "servicelog"

APP_TITLE = "Printocards Service Generator"

ENGINEER = "engineer"
CUSTOMER = "customer"


class FormView(Protocol):
    def render(self, ticket: Ticket, *, editing: bool) -> None: ...

    def show_error(self, message: str) -> None: ...

    def show_info(self, message: str) -> None: ...


class SignatureSource(Protocol):
    def is_empty(self) -> bool: ...

    def export(self) -> SignatureImage: ...

    def clear(self) -> None: ...


def window_title(ticket_number: str) -> str:
    return f"{ticket_number} - Service Log" if ticket_number else APP_TITLE


class ServiceLogFormController:
    """
    Owns the Ticket being edited.

    Responsibilities:
    - Load an existing ticket, or prepare a new one with the next sequence number
    - Field updates per section, request type toggles, charge total
    - Signature capture/clear, scanned serial
    - Create or update on submit
    - Keep the window title in sync with the ticket number

    Store failures are shown through the view; the form state stays intact.
    """

    def __init__(
            self,
            *,
            store: TicketStore,
            view: FormView,
            title_setter: Optional[Callable[[str], None]] = None,
            app_title: str = APP_TITLE,
            logger: Optional[Any] = None,
            today: Optional[Callable[[], date]] = None,
    ) -> None:
        """
        Args:
            store: Ticket Store
            view: Form view
            title_setter: Sets the top-level window title
            app_title: Title restored on close
            logger: Event logger
            today: Date source for new tickets
        """
        self._store = store
        self._view = view
        self._title_setter = title_setter
        self._app_title = app_title
        self._logger = logger
        self._today = today or date.today
        self._ticket = Ticket.new(self._today())
        self._shown_number: Optional[str] = None
        self._unloaded_id: Optional[str] = None

    # --- State ---------------------------------------------------------------

    @property
    def ticket(self) -> Ticket:
        return self._ticket

    @property
    def is_editing(self) -> bool:
        return bool(self._ticket.id)

    @property
    def total_charges(self) -> float:
        return self._ticket.spares_details.total_charges

    # --- Load ----------------------------------------------------------------

    def load(self, ticket_id: Optional[str] = None) -> bool:
        """
        Edit mode with `ticket_id`, create mode without.

        Returns:
            False only when an existing ticket could not be fetched. The form
            then stays bound to `ticket_id` in edit mode and saving is refused
            until a later fetch succeeds.
        """
        self._unloaded_id = None
        if ticket_id:
            try:
                self._ticket = self._store.get(ticket_id)
            except TicketStoreError as exc:
                self._ticket = Ticket.new(self._today())
                self._ticket.id = ticket_id
                self._unloaded_id = ticket_id
                self._log("load_failed", level="ERROR", reference_id=ticket_id, message=str(exc))
                self._view.render(self._ticket, editing=True)
                self._view.show_error(f"Failed to load log: {exc}")
                return False
            if not self._ticket.id:
                self._ticket.id = ticket_id
        else:
            self._ticket = Ticket.new(self._today())
            try:
                self._ticket.ticket_number = self._store.next_sequence_number()
            except TicketStoreError as exc:
                # the sheet stays usable; the backend assigns a number on create
                self._log("next_number_failed", level="WARNING", message=str(exc))
        self._sync_title()
        self._view.render(self._ticket, editing=self.is_editing)
        return True

    # --- Field updates -------------------------------------------------------

    def set_ticket_number(self, value: str) -> None:
        self._ticket.ticket_number = (value or "").strip()
        self._sync_title()

    def set_request_date(self, value: Any) -> None:
        self._ticket.request_date = parse_request_date(value)

    def set_brief_description(self, value: str) -> None:
        self._ticket.brief_description = value or ""

    def set_basic(self, name: str, value: str) -> None:
        _assign(self._ticket.basic_details, name, value or "")

    def set_support(self, name: str, value: str) -> None:
        if name == "request_type":
            raise ValueError("Use toggle_request_type() for request types")
        _assign(self._ticket.support_details, name, value or "")

    def set_spares(self, name: str, value: Any) -> None:
        if name == "test_card_attached":
            value = bool(value)
        _assign(self._ticket.spares_details, name, value)

    def set_engineer(self, name: str, value: Any) -> None:
        if name == "status":
            value = TicketStatus.parse(value)
        _assign(self._ticket.engineer_feedback, name, value)

    def set_customer(self, name: str, value: Any) -> None:
        if name == "rating":
            value = CustomerRating.parse(value)
        _assign(self._ticket.customer_feedback, name, value)

    def toggle_request_type(self, request_type: RequestType) -> bool:
        return self._ticket.support_details.toggle(RequestType(request_type))

    def apply_scanned_serial(self, text: str) -> None:
        """Decoded barcode/QR text becomes the product serial."""
        self._ticket.basic_details.product_serial = (text or "").strip()
        self._log("serial_scanned", message=self._ticket.basic_details.product_serial)

    # --- Signatures ----------------------------------------------------------

    def capture_signature(self, role: str, pad: SignatureSource) -> None:
        """End-of-stroke hook: keep the latest drawing of a non-empty pad."""
        if pad.is_empty():
            return
        self._set_signature(role, pad.export())

    def clear_signature(self, role: str, pad: SignatureSource) -> None:
        pad.clear()
        self._set_signature(role, EMPTY_SIGNATURE)

    def signature(self, role: str) -> SignatureImage:
        if role == ENGINEER:
            return self._ticket.engineer_feedback.engineer_signature
        if role == CUSTOMER:
            return self._ticket.customer_feedback.signature
        raise ValueError(f"Unknown signature role: {role!r}")

    # --- Submit --------------------------------------------------------------

    def submit(
            self,
            engineer_pad: Optional[SignatureSource] = None,
            customer_pad: Optional[SignatureSource] = None,
    ) -> bool:
        """
        Create or update the ticket.

        The latest non-empty pad drawings are captured first. A created ticket
        is adopted (id and number), switching the form to edit mode.
        When the opened ticket was never fetched, the fetch is retried instead
        of saving so the stored record is not overwritten or duplicated.
        """
        if self._unloaded_id is not None:
            if self.load(self._unloaded_id):
                self._view.show_error("Log reloaded from the server. Review it and save again.")
            return False

        if engineer_pad is not None:
            self.capture_signature(ENGINEER, engineer_pad)
        if customer_pad is not None:
            self.capture_signature(CUSTOMER, customer_pad)

        try:
            if self.is_editing:
                self._store.update(self._ticket.id, self._ticket)
                self._log("ticket_updated", reference_id=self._ticket.id)
                self._view.show_info("Service Log Updated Successfully!")
            else:
                created = self._store.create(self._ticket)
                self._ticket.id = created.id
                if created.ticket_number:
                    self._ticket.ticket_number = created.ticket_number
                self._log("ticket_created", reference_id=self._ticket.id)
                self._sync_title()
                self._view.show_info(
                    f"Service Log Created Successfully! Ticket #{self._ticket.ticket_number}"
                )
        except TicketStoreError as exc:
            self._view.show_error(f"Failed to save log: {exc}")
            return False
        return True

    def close(self) -> None:
        """Leaving the sheet restores the application title."""
        self._shown_number = None
        if self._title_setter is not None:
            self._title_setter(self._app_title)

    # --- Internal helpers ----------------------------------------------------

    def _set_signature(self, role: str, image: SignatureImage) -> None:
        if role == ENGINEER:
            self._ticket.engineer_feedback.engineer_signature = image
        elif role == CUSTOMER:
            self._ticket.customer_feedback.signature = image
        else:
            raise ValueError(f"Unknown signature role: {role!r}")

    def _sync_title(self) -> None:
        number = self._ticket.ticket_number
        if not number or number == self._shown_number:
            return
        self._shown_number = number
        if self._title_setter is not None:
            self._title_setter(window_title(number))

    def _log(self, event: str, *, level: str = "INFO", reference_id: Optional[str] = None,
             message: Optional[str] = None) -> None:
        logger = self._logger
        if logger is None:
            from core.logging.logic.logger import get_logger
            logger = get_logger()
        logger.log(_FEATURE_ID, event, level=level, reference_id=reference_id, message=message)


def _assign(record: Any, name: str, value: Any) -> None:
    if name not in {f.name for f in fields(record)}:
        raise AttributeError(f"{type(record).__name__} has no field {name!r}")
    setattr(record, name, value)
