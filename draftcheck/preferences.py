"""
Preference Store: persisted sensitivity setting.

One process-wide value, kept outside the process so it survives
restarts. Stored under a single key in a small SQLite key-value
table. Anything unreadable falls back to MEDIUM instead of raising.
"""

from __future__ import annotations

import sqlite3
import threading
from abc import ABC, abstractmethod
from typing import Optional

from draftcheck.logging import get_logger
from draftcheck.schemas.feedback import SensitivityLevel

logger = get_logger("preferences")

SENSITIVITY_KEY = "preview-feedback-sensitivity"
DEFAULT_SENSITIVITY = SensitivityLevel.MEDIUM


def parse_sensitivity(raw: object) -> Optional[SensitivityLevel]:
    """Case-insensitive parse. None for anything unrecognized."""
    if isinstance(raw, SensitivityLevel):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return SensitivityLevel(raw.strip().upper())
    except ValueError:
        return None


class PreferenceStore(ABC):
    """Load/save interface the coordinator depends on."""

    @abstractmethod
    def _read(self) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, value: str) -> None:
        ...

    def load(self) -> SensitivityLevel:
        try:
            raw = self._read()
        except sqlite3.Error as e:
            logger.warning("Preference read failed, using default: %s", e,
                           extra={"error_type": type(e).__name__})
            return DEFAULT_SENSITIVITY
        if raw is None:
            return DEFAULT_SENSITIVITY
        level = parse_sensitivity(raw)
        if level is None:
            logger.warning("Unrecognized stored sensitivity %r, using default", raw,
                           extra={"sensitivity": DEFAULT_SENSITIVITY.value})
            return DEFAULT_SENSITIVITY
        return level

    def save(self, level: SensitivityLevel) -> None:
        """Last write wins."""
        self._write(SensitivityLevel(level).value)


class MemoryPreferenceStore(PreferenceStore):
    """In-process store for embedding and tests."""

    def __init__(self, initial: Optional[str] = None):
        self.value = initial

    def _read(self) -> Optional[str]:
        return self.value

    def _write(self, value: str) -> None:
        self.value = value


class SqlitePreferenceStore(PreferenceStore):
    """Key-value preferences backed by SQLite."""

    def __init__(self, db_path: str = "draftcheck_prefs.db"):
        self.db_path = db_path
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def _get_conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _read(self) -> Optional[str]:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (SENSITIVITY_KEY,),
            ).fetchone()
        return row[0] if row else None

    def _write(self, value: str) -> None:
        with self._lock:
            with self._get_conn() as conn:
                conn.execute(
                    """INSERT INTO preferences (key, value) VALUES (?, ?)
                       ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                    (SENSITIVITY_KEY, value),
                )
                conn.commit()
