"""Enumerations used on the service log sheet."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class RequestType(str, Enum):
    """Kind of support request (several may apply to one ticket)."""

    DEMO = "Demo"
    INSTALLATION_TRAINING = "Installation & Training"
    WARRANTY = "Warranty"
    OWN_PRINTER = "Own Printer"
    CHARGEABLE = "Chargeable"


class TicketStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, value: object) -> "TicketStatus":
        """Unknown or missing values count as pending."""
        for member in cls:
            if member.value == value or member is value:
                return member
        return cls.PENDING


class CustomerRating(str, Enum):
    POOR = "Poor"
    AVERAGE = "Average"
    GOOD = "Good"
    EXCELLENT = "Excellent"

    @classmethod
    def parse(cls, value: object) -> Optional["CustomerRating"]:
        for member in cls:
            if member.value == value or member is value:
                return member
        return None
