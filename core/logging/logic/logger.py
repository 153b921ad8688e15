"""
core/logging/logic/logger.py
============================

Thread-safe event logger with a SQLite backend.

Every feature writes its diagnostic events (failed HTTP calls, signature
codec errors, scanner problems) through this logger so they can be inspected
after the fact, even when the user never saw an error dialog.

Performance optimizations:
- Reuses a single database connection instead of creating new ones per operation
- Connection is thread-safe via check_same_thread=False and explicit locking
"""

from __future__ import annotations

import os
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from core.logging.models.log_entry import LogEntry

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Logger:
    """Persistent event log, one row per event."""

    def __init__(self, db_path: Path) -> None:
        self._lock = threading.RLock()
        self.db_path: Path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._ensure_db()

    # ------------------------------------------------------------------ #
    #  Connection management (reuse single connection)                   #
    # ------------------------------------------------------------------ #
    def _get_connection(self) -> sqlite3.Connection:
        """Get or create a reusable database connection (thread-safe)."""
        if self._conn is None:
            with self._lock:
                if self._conn is None:
                    os.makedirs(self.db_path.parent, exist_ok=True)
                    self._conn = sqlite3.connect(
                        str(self.db_path),
                        check_same_thread=False,
                    )
                    self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        """Close the database connection and release resources."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ------------------------------------------------------------------ #
    #  Public API: log                                                   #
    # ------------------------------------------------------------------ #
    def log(
        self,
        feature: str,
        event: str,
        *,
        username: Optional[str] = None,
        level: str = "INFO",
        reference_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        """
        Persist one log entry.

        *level* must be one of DEBUG/INFO/WARNING/ERROR; *reference_id* is
        typically a ticket id or number.
        """
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        entry = LogEntry(
            id=None,
            timestamp=datetime.now(timezone.utc),
            log_level=level,
            username=username or "unknown",
            feature=feature,
            event=event,
            reference_id=reference_id,
            message=message,
        )

        self._insert_log(entry)

    # ------------------------------------------------------------------ #
    #  Fetch / Query / Clear                                             #
    # ------------------------------------------------------------------ #
    def fetch_logs(self, limit: int = 100) -> List[LogEntry]:
        with self._lock:
            conn = self._get_connection()
            rows = conn.execute(
                "SELECT * FROM logs ORDER BY timestamp DESC, id DESC LIMIT ?", (limit,)
            ).fetchall()
            return [LogEntry.from_dict(dict(row)) for row in rows]

    def query_logs(
        self,
        *,
        feature: Optional[str] = None,
        event: Optional[str] = None,
        reference_id: Optional[str] = None,
        level: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        limit: int = 1_000,
    ) -> List[LogEntry]:
        with self._lock:
            conn = self._get_connection()

            query = "SELECT * FROM logs WHERE 1=1"
            params: list[object] = []

            if feature is not None:
                query += " AND feature = ?"
                params.append(feature)
            if event is not None:
                query += " AND event = ?"
                params.append(event)
            if reference_id is not None:
                query += " AND reference_id = ?"
                params.append(reference_id)
            if level is not None:
                query += " AND log_level = ?"
                params.append(level.upper())
            if start_time is not None:
                query += " AND timestamp >= ?"
                params.append(start_time)
            if end_time is not None:
                query += " AND timestamp <= ?"
                params.append(end_time)

            query += " ORDER BY timestamp DESC, id DESC LIMIT ?"
            params.append(limit)

            rows = conn.execute(query, params).fetchall()
            return [LogEntry.from_dict(dict(row)) for row in rows]

    def clear_logs(self) -> None:
        with self._lock:
            conn = self._get_connection()
            conn.execute("DELETE FROM logs")
            conn.commit()

    # ------------------------------------------------------------------ #
    #  Internal helpers                                                  #
    # ------------------------------------------------------------------ #
    def _ensure_db(self) -> None:
        with self._lock:
            conn = self._get_connection()
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    username TEXT,
                    feature TEXT NOT NULL,
                    event TEXT NOT NULL,
                    reference_id TEXT,
                    message TEXT,
                    log_level TEXT NOT NULL DEFAULT 'INFO'
                )
                """
            )
            conn.commit()

    def _insert_log(self, entry: LogEntry) -> None:
        with self._lock:
            conn = self._get_connection()
            conn.execute(
                """
                INSERT INTO logs
                    (timestamp, username, feature, event,
                     reference_id, message, log_level)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.timestamp.isoformat(),
                    entry.username,
                    entry.feature,
                    entry.event,
                    entry.reference_id,
                    entry.message,
                    entry.log_level,
                ),
            )
            conn.commit()


# --------------------------------------------------------------------------- #
#  Global instance                                                            #
# --------------------------------------------------------------------------- #
_logger: Logger | None = None
_logger_lock = threading.Lock()


def get_logger() -> Logger:
    """Return the application-wide logger, opening the configured database lazily."""
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                from core.config.config_service import get_config_service
                _logger = Logger(get_config_service().database.logging)
    return _logger
