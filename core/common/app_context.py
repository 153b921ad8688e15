# core/common/app_context.py
"""
Global runtime context & service registry for the service log client.

IMPORTANT ARCHITECTURE RULE:
- ConfigService is the SINGLE source of truth for settings and paths.
- Services are created lazily on first access so importing this module has
  no side effects (no database file, no network session).
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from core.config.config_service import ConfigService, get_config_service
from core.logging.logic.logger import Logger, get_logger


class AppContext:
    """Central runtime context (no GUI state)."""

    # ---------- Service registry for DI -------------------------------
    services: Dict[str, object] = {}
    _factories: Dict[str, Callable[[], object]] = {}

    # ---------- Dynamic registration ---------------------------------
    @classmethod
    def register_service(cls, name: str, instance: object) -> None:
        cls.services[name] = instance

    @classmethod
    def register_factory(cls, name: str, factory: Callable[[], object]) -> None:
        """Register a lazily created service; replaces any cached instance."""
        cls._factories[name] = factory
        cls.services.pop(name, None)

    @classmethod
    def get_service(cls, name: str) -> Any:
        if name not in cls.services:
            factory = cls._factories.get(name)
            if factory is None:
                raise KeyError(f"Unknown service: {name}")
            cls.services[name] = factory()
        return cls.services[name]

    @classmethod
    def reset(cls) -> None:
        """Drop cached instances (factories stay registered)."""
        cls.services.clear()

    # ---------- Typed accessors --------------------------------------
    @classmethod
    def config(cls) -> ConfigService:
        return cls.get_service("config")

    @classmethod
    def logger(cls) -> Logger:
        return cls.get_service("logger")

    @classmethod
    def ticket_store(cls):
        return cls.get_service("ticket_store")


def _ticket_store_factory():
    # lazy import avoids a core -> servicelog import at module load
    from servicelog.logic.ticket_store import HttpTicketStore
    return HttpTicketStore.from_config(AppContext.config(), logger=AppContext.logger())


AppContext.register_factory("config", get_config_service)
AppContext.register_factory("logger", get_logger)
AppContext.register_factory("ticket_store", _ticket_store_factory)
