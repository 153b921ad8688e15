"""
Service log feature package initializer.

Provides factory functions that the main window can call to create the
dashboard and the service log sheet without hard-coding internals.

Both factories accept a `parent` Tk container and an `app_context` that
supplies the shared Ticket Store and configuration. Views are imported on
first use so the models and logic stay importable without a display.
"""

from typing import Callable, Optional
import tkinter as tk


def get_feature_name() -> str:
    """
    Human readable feature name (used for navigation labels).
    """
    return "Service Log Sheet"


def create_dashboard_view(
    parent: tk.Misc,
    app_context,
    *,
    on_open: Optional[Callable[[str], None]] = None,
    on_new: Optional[Callable[[], None]] = None,
) -> tk.Frame:
    """
    Factory for the ticket dashboard.

    Args:
        parent (tk.Misc): Tk container to mount the view onto.
        app_context: Application context providing ``ticket_store()``.
        on_open: Called with a ticket id when a ticket is opened.
        on_new: Called when a new ticket is requested.
    """
    from .gui.dashboard_view import DashboardView

    return DashboardView(parent, store=app_context.ticket_store(), on_open=on_open, on_new=on_new)


def create_form_view(
    parent: tk.Misc,
    app_context,
    *,
    ticket_id: Optional[str] = None,
    title_setter: Optional[Callable[[str], None]] = None,
    on_back: Optional[Callable[[], None]] = None,
) -> tk.Frame:
    """
    Factory for the service log sheet (new ticket without `ticket_id`).
    """
    from signature.models.signature_config import SignatureConfig
    from .gui.service_log_form_view import ServiceLogFormView
    from .logic.barcode_scanner import ScanConfig

    config = app_context.config()
    return ServiceLogFormView(
        parent,
        store=app_context.ticket_store(),
        ticket_id=ticket_id,
        title_setter=title_setter,
        on_back=on_back,
        scan_config=ScanConfig.from_settings(config.scanner),
        signature_config=SignatureConfig.from_settings(config.signature),
    )
