from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from ...constants import DEFAULT_UNIT, TABLE_VEGETABLE_TYPES
from ...utils.validators import non_empty
from ..errors import NotFoundError, StoreError, ValidationError


@dataclass
class CommodityType:
    id: int
    name: str
    default_unit: str
    is_active: bool


class CommoditiesRepo:
    """The commodity catalogue (VegetableTypes table)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @staticmethod
    def _row_to_type(r: sqlite3.Row) -> CommodityType:
        return CommodityType(
            id=int(r["id"]),
            name=r["name"],
            default_unit=r["default_unit"],
            is_active=bool(r["is_active"]),
        )

    def list_commodity_types(self, active_only: bool = True) -> list[CommodityType]:
        sql = f"SELECT id, name, default_unit, is_active FROM {TABLE_VEGETABLE_TYPES}"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY name COLLATE NOCASE"
        return [self._row_to_type(r) for r in self.conn.execute(sql).fetchall()]

    def get(self, name: str) -> CommodityType | None:
        r = self.conn.execute(
            f"SELECT id, name, default_unit, is_active FROM {TABLE_VEGETABLE_TYPES} WHERE name = ?",
            (name.strip(),),
        ).fetchone()
        return self._row_to_type(r) if r else None

    def add_commodity_type(self, name: str, default_unit: str = DEFAULT_UNIT) -> int:
        """
        Add a commodity, or re-activate (and re-unit) one with the same name.
        Returns its id.
        """
        if not non_empty(name):
            raise ValidationError("Commodity name cannot be empty.", field="name")
        if not non_empty(default_unit):
            raise ValidationError("Default unit cannot be empty.", field="default_unit")
        name_n = name.strip()
        try:
            with self.conn:
                self.conn.execute(
                    f"""
                    INSERT INTO {TABLE_VEGETABLE_TYPES}(name, default_unit) VALUES (?, ?)
                    ON CONFLICT(name) DO UPDATE
                       SET default_unit = excluded.default_unit,
                           is_active = 1
                    """,
                    (name_n, default_unit.strip()),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not save commodity {name_n!r}: {e}") from e
        return self.get(name_n).id

    def deactivate(self, name: str) -> None:
        with self.conn:
            cur = self.conn.execute(
                f"UPDATE {TABLE_VEGETABLE_TYPES} SET is_active = 0 WHERE name = ?",
                (name.strip(),),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Unknown commodity {name!r}.")
