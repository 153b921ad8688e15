"""
service_log_form_view.py

The service log sheet: ticket header, customer/product details with serial
scanning, support request, spares and charges, engineer and customer feedback
with signature pads, and the Save / Print / Back toolbar.

Field edits are forwarded to ServiceLogFormController as they happen; the
controller owns the Ticket.
"""

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Dict, Optional

from tkcalendar import DateEntry

from servicelog.controllers.service_log_form_controller import CUSTOMER, ENGINEER, ServiceLogFormController
from servicelog.exceptions.errors import PrintError
from servicelog.gui.scan_dialog import ScanDialog
from servicelog.logic.barcode_scanner import ScanConfig
from servicelog.logic.print_service import PrintService
from servicelog.logic.ticket_store import TicketStore
from servicelog.models.ticket import Ticket
from servicelog.models.ticket_enums import CustomerRating, RequestType, TicketStatus
from signature.gui.signature_pad import SignaturePad
from signature.models.signature_config import SignatureConfig

# (section, field) -> label, in sheet order
_BASIC = (
    ("ticket_id", "Customer Details"),
    ("customer_name", "Customer Name"),
    ("service_location", "Service Location"),
    ("product_name", "Product Name"),
    ("product_serial", "Product Sl. No."),
)
_SUPPORT = (
    ("request_mode", "Request Mode"),
    ("received_by", "Received By"),
    ("customer_contact", "Customer Contact"),
    ("reseller_name", "Reseller Name"),
)
_SPARES = (
    ("replaced_spare", "Replaced Spare"),
    ("replaced_spare_sl_no", "Sl. No."),
    ("damaged_old_spare", "Damaged Old Spare"),
    ("damaged_old_spare_sl_no", "Sl. No."),
    ("printing_counter", "Printing Counter"),
)


class ServiceLogFormView(ttk.Frame):
    """One service log sheet, either new (no ticket id) or editing an existing ticket."""

    def __init__(
        self,
        parent,
        *,
        store: TicketStore,
        ticket_id: Optional[str] = None,
        title_setter: Optional[Callable[[str], None]] = None,
        on_back: Optional[Callable[[], None]] = None,
        print_service: Optional[PrintService] = None,
        scan_config: Optional[ScanConfig] = None,
        signature_config: Optional[SignatureConfig] = None,
        **kwargs,
    ):
        super().__init__(parent, **kwargs)
        self._on_back = on_back
        self._print_service = print_service or PrintService()
        self._scan_config = scan_config or ScanConfig()
        self._signature_config = signature_config or SignatureConfig()

        self._vars: Dict[tuple, tk.Variable] = {}
        self._texts: Dict[tuple, tk.Text] = {}
        self._type_vars: Dict[RequestType, tk.BooleanVar] = {}
        self._rendering = False

        self.controller = ServiceLogFormController(store=store, view=self, title_setter=title_setter)
        self._build_ui()
        self.bind("<Destroy>", self._on_destroy)
        self.controller.load(ticket_id)

    # ------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------

    def _build_ui(self):
        toolbar = ttk.Frame(self)
        toolbar.pack(fill=tk.X, padx=10, pady=(10, 5))
        ttk.Button(toolbar, text="Back to Dashboard", command=self._on_back_clicked).pack(side=tk.LEFT)
        ttk.Button(toolbar, text="Print", command=self._on_print).pack(side=tk.RIGHT, padx=2)
        self.save_button = ttk.Button(toolbar, text="Save Log", command=self._on_save)
        self.save_button.pack(side=tk.RIGHT, padx=2)
        self.mode_label = ttk.Label(toolbar, text="", foreground="#b45309")
        self.mode_label.pack(side=tk.RIGHT, padx=10)

        self.sheet = ttk.Frame(self, padding=8, relief=tk.SOLID, borderwidth=1)
        self.sheet.pack(fill=tk.BOTH, expand=True, padx=10, pady=5)
        self.sheet.columnconfigure(0, weight=1)
        self.sheet.columnconfigure(1, weight=1)

        self._build_header(self.sheet)
        self._build_basic(self.sheet)
        self._build_support(self.sheet)
        self._build_spares(self.sheet)
        self._build_feedback(self.sheet)

    def _build_header(self, parent):
        frame = ttk.Frame(parent)
        frame.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 5))
        ttk.Label(frame, text="SERVICE LOG SHEET", font=("TkDefaultFont", 13, "bold")).pack(side=tk.LEFT)

        date_var = tk.StringVar()
        self.date_entry = DateEntry(frame, date_pattern="yyyy-mm-dd", textvariable=date_var, width=12)
        self.date_entry.pack(side=tk.RIGHT, padx=2)
        self.date_entry.bind("<<DateEntrySelected>>", lambda _e: self._push_date())
        self.date_entry.bind("<FocusOut>", lambda _e: self._push_date())
        ttk.Label(frame, text="Date:").pack(side=tk.RIGHT)

        number_var = self._var(("ticket", "ticket_number"))
        ttk.Entry(frame, textvariable=number_var, width=14).pack(side=tk.RIGHT, padx=(2, 12))
        ttk.Label(frame, text="Ticket No.:").pack(side=tk.RIGHT)

    def _build_basic(self, parent):
        frame = ttk.LabelFrame(parent, text="Customer & Product")
        frame.grid(row=1, column=0, columnspan=2, sticky="ew", pady=3)
        frame.columnconfigure(1, weight=1)
        frame.columnconfigure(3, weight=1)
        for i, (name, label) in enumerate(_BASIC):
            row, col = divmod(i, 2)
            self._entry(frame, ("basic", name), label, row, col * 2)
        ttk.Button(frame, text="Scan", command=self._on_scan, width=6).grid(row=2, column=4, padx=2)
        self._text(frame, ("basic", "problem_description"), "Problem Description", row=3, height=2)

    def _build_support(self, parent):
        frame = ttk.LabelFrame(parent, text="Support Details")
        frame.grid(row=2, column=0, columnspan=2, sticky="ew", pady=3)
        frame.columnconfigure(1, weight=1)
        frame.columnconfigure(3, weight=1)

        types = ttk.Frame(frame)
        types.grid(row=0, column=0, columnspan=4, sticky="w", padx=2, pady=2)
        ttk.Label(types, text="Request Type:").pack(side=tk.LEFT, padx=(0, 6))
        for rt in RequestType:
            var = tk.BooleanVar(value=False)
            self._type_vars[rt] = var
            ttk.Checkbutton(types, text=rt.value, variable=var,
                            command=lambda r=rt: self._toggle_type(r)).pack(side=tk.LEFT, padx=4)

        for i, (name, label) in enumerate(_SUPPORT):
            row, col = divmod(i, 2)
            self._entry(frame, ("support", name), label, row + 1, col * 2)

    def _build_spares(self, parent):
        frame = ttk.LabelFrame(parent, text="Spares & Charges")
        frame.grid(row=3, column=0, columnspan=2, sticky="ew", pady=3)
        frame.columnconfigure(1, weight=1)
        frame.columnconfigure(3, weight=1)
        for i, (name, label) in enumerate(_SPARES):
            row, col = divmod(i, 2)
            self._entry(frame, ("spares", name), label, row, col * 2)

        card_var = tk.BooleanVar(value=False)
        self._vars[("spares", "test_card_attached")] = card_var
        ttk.Checkbutton(frame, text="Test Card Attached", variable=card_var,
                        command=lambda: self._push(("spares", "test_card_attached"))).grid(
            row=2, column=2, columnspan=2, sticky="w", padx=2)

        self._text(frame, ("spares", "charge_description"), "Charges Description", row=3, height=2)

        charges = ttk.Frame(frame)
        charges.grid(row=4, column=0, columnspan=4, sticky="e", pady=2)
        for name, label in (("service_charge", "Service Charge"), ("any_other_charges", "Any Other Charges")):
            ttk.Label(charges, text=label).pack(side=tk.LEFT, padx=(10, 2))
            ttk.Entry(charges, textvariable=self._var(("spares", name)), width=10, justify=tk.RIGHT).pack(side=tk.LEFT)
        self.total_label = ttk.Label(charges, text="Total: 0", font=("TkDefaultFont", 10, "bold"))
        self.total_label.pack(side=tk.LEFT, padx=(14, 2))

        self._text(frame, ("ticket", "brief_description"), "Brief Description of Work", row=5, height=3)

    def _build_feedback(self, parent):
        eng = ttk.LabelFrame(parent, text="Engineer Feedback")
        eng.grid(row=4, column=0, sticky="nsew", pady=3, padx=(0, 3))
        eng.columnconfigure(1, weight=1)
        self._entry(eng, ("engineer", "engineer_name"), "Engineer Name", 0, 0)
        self._entry(eng, ("engineer", "time_spent"), "Time Spent", 1, 0)
        self._combo(eng, ("engineer", "status"), "Status", [s.value for s in TicketStatus], 2)
        self.engineer_pad = self._pad(eng, ENGINEER, 3)

        cust = ttk.LabelFrame(parent, text="Customer Feedback")
        cust.grid(row=4, column=1, sticky="nsew", pady=3, padx=(3, 0))
        cust.columnconfigure(1, weight=1)
        self._combo(cust, ("customer", "rating"), "Rating", [""] + [r.value for r in CustomerRating], 0)
        self._entry(cust, ("customer", "representative_name"), "Representative", 1, 0)
        self.customer_pad = self._pad(cust, CUSTOMER, 2)
        self._entry(cust, ("customer", "contact_no"), "Contact No.", 4, 0)
        self._entry(cust, ("customer", "email"), "Email", 5, 0)
        self._entry(cust, ("customer", "remarks"), "Remarks", 6, 0)

    # --- widget helpers --------------------------------------------------

    def _var(self, key: tuple) -> tk.StringVar:
        var = tk.StringVar()
        self._vars[key] = var
        var.trace_add("write", lambda *_k, k=key: self._push(k))
        return var

    def _entry(self, parent, key: tuple, label: str, row: int, col: int):
        ttk.Label(parent, text=label).grid(row=row, column=col, sticky=tk.W, padx=2, pady=2)
        ttk.Entry(parent, textvariable=self._var(key)).grid(row=row, column=col + 1, sticky="ew", padx=2, pady=2)

    def _combo(self, parent, key: tuple, label: str, values, row: int):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky=tk.W, padx=2, pady=2)
        ttk.Combobox(parent, textvariable=self._var(key), values=values, state="readonly").grid(
            row=row, column=1, sticky="ew", padx=2, pady=2)

    def _text(self, parent, key: tuple, label: str, *, row: int, height: int):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="nw", padx=2, pady=2)
        widget = tk.Text(parent, height=height, wrap="word")
        widget.grid(row=row, column=1, columnspan=3, sticky="ew", padx=2, pady=2)
        widget.bind("<KeyRelease>", lambda _e, k=key: self._push(k))
        widget.bind("<FocusOut>", lambda _e, k=key: self._push(k))
        self._texts[key] = widget

    def _pad(self, parent, role: str, row: int) -> SignaturePad:
        head = ttk.Frame(parent)
        head.grid(row=row, column=0, columnspan=2, sticky="ew", padx=2, pady=(6, 0))
        ttk.Label(head, text="Signature").pack(side=tk.LEFT)
        pad_holder = {}
        ttk.Button(head, text="Clear", width=6,
                   command=lambda: self.controller.clear_signature(role, pad_holder["pad"])).pack(side=tk.RIGHT)
        pad = SignaturePad(
            parent,
            config=self._signature_config,
            name=role,
            on_end=lambda: self.controller.capture_signature(role, pad_holder["pad"]),
        )
        pad_holder["pad"] = pad
        pad.grid(row=row + 1, column=0, columnspan=2, sticky="nsew", padx=2, pady=2)
        parent.rowconfigure(row + 1, weight=1)
        return pad

    # ------------------------------------------------------------
    # View API used by the controller
    # ------------------------------------------------------------

    def render(self, ticket: Ticket, *, editing: bool) -> None:
        self._rendering = True
        try:
            values = {
                ("ticket", "ticket_number"): ticket.ticket_number,
                ("ticket", "brief_description"): ticket.brief_description,
                ("engineer", "status"): ticket.engineer_feedback.status.value,
                ("customer", "rating"): ticket.customer_feedback.rating.value if ticket.customer_feedback.rating else "",
            }
            for section, record in (("basic", ticket.basic_details), ("support", ticket.support_details),
                                    ("spares", ticket.spares_details), ("engineer", ticket.engineer_feedback),
                                    ("customer", ticket.customer_feedback)):
                for key in list(self._vars) + list(self._texts):
                    if key[0] == section and key not in values:
                        values[key] = getattr(record, key[1])

            for key, var in self._vars.items():
                if key in values:
                    var.set(values[key])
            for key, widget in self._texts.items():
                widget.delete("1.0", tk.END)
                widget.insert("1.0", str(values.get(key, "")))
            for rt, var in self._type_vars.items():
                var.set(rt in ticket.support_details.request_type)
            if ticket.request_date:
                self.date_entry.set_date(ticket.request_date)
        finally:
            self._rendering = False

        for pad, image in ((self.engineer_pad, ticket.engineer_feedback.engineer_signature),
                           (self.customer_pad, ticket.customer_feedback.signature)):
            if image.is_empty:
                pad.clear()
            else:
                pad.load(image)

        self.save_button.configure(text="Update Log" if editing else "Save Log")
        self.mode_label.configure(text=f"Editing Ticket #{ticket.ticket_number}" if editing else "")
        self._update_total()

    def show_error(self, message: str) -> None:
        messagebox.showerror("Service Log", message, parent=self)

    def show_info(self, message: str) -> None:
        messagebox.showinfo("Service Log", message, parent=self)
        editing = self.controller.is_editing
        self.save_button.configure(text="Update Log" if editing else "Save Log")
        if editing:
            self.mode_label.configure(text=f"Editing Ticket #{self.controller.ticket.ticket_number}")
            self._vars[("ticket", "ticket_number")].set(self.controller.ticket.ticket_number)

    # ------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------

    def _push(self, key: tuple) -> None:
        if self._rendering:
            return
        section, name = key
        if key in self._texts:
            value = self._texts[key].get("1.0", "end-1c")
        else:
            value = self._vars[key].get()

        if section == "ticket" and name == "ticket_number":
            self.controller.set_ticket_number(value)
        elif section == "ticket":
            self.controller.set_brief_description(value)
        elif section == "basic":
            self.controller.set_basic(name, value)
        elif section == "support":
            self.controller.set_support(name, value)
        elif section == "spares":
            self.controller.set_spares(name, value)
            self._update_total()
        elif section == "engineer":
            self.controller.set_engineer(name, value)
        elif section == "customer":
            self.controller.set_customer(name, value)

    def _push_date(self) -> None:
        if not self._rendering:
            self.controller.set_request_date(self.date_entry.get_date())

    def _toggle_type(self, request_type: RequestType) -> None:
        selected = self.controller.toggle_request_type(request_type)
        self._type_vars[request_type].set(selected)

    def _update_total(self) -> None:
        self.total_label.configure(text=f"Total: {self.controller.total_charges:g}")

    def _on_scan(self) -> None:
        ScanDialog(self, config=self._scan_config, on_decoded=self._on_serial_scanned)

    def _on_serial_scanned(self, text: str) -> None:
        self.controller.apply_scanned_serial(text)
        self._rendering = True
        try:
            self._vars[("basic", "product_serial")].set(self.controller.ticket.basic_details.product_serial)
        finally:
            self._rendering = False

    def _on_save(self) -> None:
        self.controller.submit(self.engineer_pad, self.customer_pad)

    def _on_print(self) -> None:
        try:
            self._print_service.render_current_view(self.sheet, reference_id=self.controller.ticket.id)
        except PrintError as exc:
            messagebox.showerror("Print", str(exc), parent=self)

    def _on_back_clicked(self) -> None:
        if self._on_back is not None:
            self._on_back()

    def _on_destroy(self, e) -> None:
        if e.widget is self:
            self.controller.close()
