from __future__ import annotations

import logging
import sqlite3

from ...constants import (
    DEFAULT_BUSINESS_CLOSE,
    DEFAULT_BUSINESS_OPEN,
    DEFAULT_DAILY_TARGET,
    SETTING_BUSINESS_CLOSE,
    SETTING_BUSINESS_OPEN,
    SETTING_DAILY_TARGET,
    TABLE_SETTINGS,
)
from ...utils.validators import is_hh_mm, non_empty, try_parse_float
from ..errors import StoreError, ValidationError

_log = logging.getLogger(__name__)


class SettingsRepo:
    """Key/value configuration (daily target, business hours, ...)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        row = self.conn.execute(
            f"SELECT value FROM {TABLE_SETTINGS} WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value) -> None:
        if not non_empty(key):
            raise ValidationError("Setting key cannot be empty.", field="key")
        if value is None:
            raise ValidationError("Setting value cannot be empty.", field="value")
        try:
            with self.conn:
                self.conn.execute(
                    f"""
                    INSERT INTO {TABLE_SETTINGS}(key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE
                       SET value = excluded.value,
                           updated_at = CURRENT_TIMESTAMP
                    """,
                    (key.strip(), str(value)),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not save setting {key!r}: {e}") from e

    # ---- typed helpers ----------------------------------------------------

    def get_daily_target(self) -> int:
        raw = self.get_setting(SETTING_DAILY_TARGET)
        if raw is None:
            return DEFAULT_DAILY_TARGET
        ok, value = try_parse_float(raw)
        if not ok or value <= 0:
            _log.warning("daily_target %r is not a usable number; using %s", raw, DEFAULT_DAILY_TARGET)
            return DEFAULT_DAILY_TARGET
        return int(value)

    def set_daily_target(self, target) -> None:
        ok, value = try_parse_float(target)
        if not ok:
            raise ValidationError("Daily target must be a whole number.", field="daily_target")
        if value <= 0 or value != int(value):
            raise ValidationError("Daily target must be a positive whole number.", field="daily_target")
        self.set_setting(SETTING_DAILY_TARGET, int(value))

    def get_business_hours(self) -> tuple[str, str]:
        return (
            self.get_setting(SETTING_BUSINESS_OPEN, DEFAULT_BUSINESS_OPEN),
            self.get_setting(SETTING_BUSINESS_CLOSE, DEFAULT_BUSINESS_CLOSE),
        )

    def set_business_hours(self, open_at: str, close_at: str) -> None:
        if not (is_hh_mm(open_at) and is_hh_mm(close_at)):
            raise ValidationError("Business hours must be HH:MM.", field="business_hours")
        if open_at >= close_at:
            raise ValidationError("Opening time must be before closing time.", field="business_hours")
        self.set_setting(SETTING_BUSINESS_OPEN, open_at)
        self.set_setting(SETTING_BUSINESS_CLOSE, close_at)
