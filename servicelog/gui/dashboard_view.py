"""
dashboard_view.py

Ticket dashboard: statistics cards, search box, ticket table and actions
(new, open, delete, refresh).

All logic lives in DashboardController; this frame only renders rows and
forwards user actions.
"""

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Dict, Optional, Sequence

from servicelog.controllers.dashboard_controller import DashboardController
from servicelog.logic.dashboard_service import DashboardRow
from servicelog.logic.ticket_store import TicketStore
from servicelog.models.ticket import DashboardStats


class DashboardView(ttk.Frame):
    """Ticket list with search and delete; double click opens a ticket."""

    COLUMNS = ("ticket", "date", "customer", "product", "serial", "engineer", "status")
    HEADINGS = ("Ticket #", "Date", "Customer", "Product", "Serial No.", "Engineer", "Status")

    def __init__(
        self,
        parent,
        *,
        store: TicketStore,
        on_open: Optional[Callable[[str], None]] = None,
        on_new: Optional[Callable[[], None]] = None,
        **kwargs,
    ):
        super().__init__(parent, **kwargs)
        self.search_var = tk.StringVar()
        self.total_var = tk.StringVar(value="0")
        self.pending_var = tk.StringVar(value="0")
        self.completed_var = tk.StringVar(value="0")
        self._row_ids: Dict[str, str] = {}

        self._build_ui()
        self.controller = DashboardController(store=store, view=self, on_open=on_open, on_new=on_new)
        self.search_var.trace_add("write", lambda *_: self.controller.search(self.search_var.get()))
        self.controller.load()

    # ------------------------------------------------------------

    def _build_ui(self):
        header = ttk.Frame(self)
        header.pack(fill=tk.X, padx=10, pady=(10, 5))
        ttk.Label(header, text="Service Log Sheet", font=("TkDefaultFont", 14, "bold")).pack(side=tk.LEFT)
        ttk.Button(header, text="New Service Log", command=self._on_new).pack(side=tk.RIGHT, padx=2)
        ttk.Button(header, text="Refresh", command=self._on_refresh).pack(side=tk.RIGHT, padx=2)

        stats = ttk.Frame(self)
        stats.pack(fill=tk.X, padx=10, pady=5)
        for title, var in (("Total Logs", self.total_var),
                           ("Pending", self.pending_var),
                           ("Completed", self.completed_var)):
            card = ttk.LabelFrame(stats, text=title)
            card.pack(side=tk.LEFT, padx=5, ipadx=20)
            ttk.Label(card, textvariable=var, font=("TkDefaultFont", 16, "bold")).pack(padx=10, pady=5)

        search = ttk.Frame(self)
        search.pack(fill=tk.X, padx=10, pady=5)
        ttk.Label(search, text="Search:").pack(side=tk.LEFT)
        ttk.Entry(search, textvariable=self.search_var, width=40).pack(side=tk.LEFT, padx=5)

        table = ttk.Frame(self)
        table.pack(fill=tk.BOTH, expand=True, padx=10, pady=5)
        self.tree = ttk.Treeview(table, columns=self.COLUMNS, show="headings", selectmode="browse")
        for col, text in zip(self.COLUMNS, self.HEADINGS):
            self.tree.heading(col, text=text)
            self.tree.column(col, width=120, anchor=tk.W)
        scroll = ttk.Scrollbar(table, orient=tk.VERTICAL, command=self.tree.yview)
        self.tree.configure(yscrollcommand=scroll.set)
        self.tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)
        self.tree.bind("<Double-1>", lambda _e: self._on_open())

        actions = ttk.Frame(self)
        actions.pack(fill=tk.X, padx=10, pady=(0, 10))
        ttk.Button(actions, text="Open", command=self._on_open).pack(side=tk.LEFT, padx=2)
        ttk.Button(actions, text="Delete", command=self._on_delete).pack(side=tk.LEFT, padx=2)

        self.empty_label = ttk.Label(self, text="No service logs found", foreground="gray")

    # ------------------------------------------------------------
    # View API used by the controller
    # ------------------------------------------------------------

    def show_rows(self, rows: Sequence[DashboardRow], stats: DashboardStats) -> None:
        for item in self.tree.get_children():
            self.tree.delete(item)
        self._row_ids.clear()
        for row in rows:
            item = self.tree.insert("", "end", values=row.as_tuple())
            self._row_ids[item] = row.ticket_id

        self.total_var.set(str(stats.total))
        self.pending_var.set(str(stats.pending))
        self.completed_var.set(str(stats.completed))

        if rows:
            self.empty_label.pack_forget()
        else:
            self.empty_label.pack(pady=5)

    def show_error(self, message: str) -> None:
        messagebox.showerror("Service Log", message, parent=self)

    def confirm(self, message: str) -> bool:
        return messagebox.askyesno("Delete Service Log", message, parent=self)

    # ------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------

    def _selected_id(self) -> Optional[str]:
        selection = self.tree.selection()
        if not selection:
            return None
        return self._row_ids.get(selection[0])

    def _on_open(self):
        ticket_id = self._selected_id()
        if ticket_id:
            self.controller.open_ticket(ticket_id)

    def _on_delete(self):
        ticket_id = self._selected_id()
        if ticket_id:
            self.controller.delete(ticket_id)

    def _on_new(self):
        self.controller.new_ticket()

    def _on_refresh(self):
        self.controller.load()
