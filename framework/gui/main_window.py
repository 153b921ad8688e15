"""
framework/gui/main_window.py
============================

Root window with page navigation: dashboard <-> service log sheet.
The window title follows the open ticket ("<number> - Service Log") and
falls back to the application name on the dashboard.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import Frame, Label, X
from typing import Optional

import servicelog
from core.common.app_context import AppContext


# --------------------------------------------------------------------------- #
#  MainWindow                                                                 #
# --------------------------------------------------------------------------- #
class MainWindow(tk.Tk):
    """Main application window; exactly one page is shown at a time."""

    # ------------------------------------------------------------------ #
    # Konstruktor                                                        #
    # ------------------------------------------------------------------ #
    def __init__(self, app_context: type[AppContext] = AppContext) -> None:
        super().__init__()
        self.app_context = app_context
        config = app_context.config()

        self.app_title = config.general.app_name
        self.title(self.app_title)
        self.geometry("1100x900")

        self.active_view: Optional[tk.Frame] = None

        self.display_area = Frame(self)
        self.display_area.pack(fill="both", expand=True)

        version = config.general.version
        self.status_bar = Label(
            self, text=f"{self.app_title} {version}".strip(), anchor="w", bg="#eeeeee"
        )
        self.status_bar.pack(side="bottom", fill=X)

        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.show_dashboard()

    # ------------------------------------------------------------------ #
    # View-Handling                                                      #
    # ------------------------------------------------------------------ #
    def clear_display_area(self) -> None:
        for widget in self.display_area.winfo_children():
            widget.destroy()
        self.active_view = None

    def show_dashboard(self) -> None:
        self.clear_display_area()
        self.title(self.app_title)
        self.active_view = servicelog.create_dashboard_view(
            self.display_area,
            self.app_context,
            on_open=self.show_form,
            on_new=lambda: self.show_form(None),
        )
        self.active_view.pack(fill="both", expand=True)
        self.status_bar.config(text="Dashboard")

    def show_form(self, ticket_id: Optional[str]) -> None:
        self.clear_display_area()
        self.active_view = servicelog.create_form_view(
            self.display_area,
            self.app_context,
            ticket_id=ticket_id,
            title_setter=self.title,
            on_back=self.show_dashboard,
        )
        self.active_view.pack(fill="both", expand=True)
        self.status_bar.config(text="Editing service log" if ticket_id else "New service log")

    # ------------------------------------------------------------------ #
    # Shutdown                                                           #
    # ------------------------------------------------------------------ #
    def on_close(self) -> None:
        self.app_context.logger().log("framework", "app_closed")
        self.clear_display_area()
        self.destroy()
