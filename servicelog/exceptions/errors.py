"""Service log feature exceptions."""
from __future__ import annotations

from typing import Optional


class ServiceLogError(Exception):
    """Base exception for the service log feature."""


class TicketStoreError(ServiceLogError):
    """
    The Ticket Store could not complete a request (network, timeout,
    non-2xx status or unreadable body). Shown to the user, never retried.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ScannerError(ServiceLogError):
    """Camera could not be opened or the scan session failed."""


class PrintError(ServiceLogError):
    """The current view could not be handed to the OS print facility."""
