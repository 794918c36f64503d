"""
Tests for the per-day inventory ledger: intake, consumption, carry-over.
"""

from __future__ import annotations

import pytest

from produce_ledger.database.errors import ValidationError

D1 = "2024-01-01"
D2 = "2024-01-02"


# ---------------------------------------------------------------------------
# Suite F – intake & consumption
# ---------------------------------------------------------------------------


def test_f1_intake_sets_current_to_initial(ledger) -> None:
    """F1: a new record opens with current_stock == initial_stock."""
    rid = ledger.intake("Tomatoes", 100, "trays", 20, D1, truck_arrival_time="04:45")
    rec = ledger.inventory.get("Tomatoes", D1)
    assert rec.id == rid
    assert (rec.initial_stock, rec.current_stock, rec.unit, rec.market_rate) == (100, 100, "trays", 20)
    assert rec.truck_arrival_time == "04:45"
    assert rec.carry_over_from_date is None


def test_f2_second_intake_replaces_the_first(ledger) -> None:
    """F2: same (commodity, date) is last-write-wins, not a merge."""
    first = ledger.intake("Onions", 30, "sacks", 400, D1)
    ledger.inventory.apply_consumption("Onions", 5, D1)
    second = ledger.intake("Onions", 20, "sacks", 420, D1)

    assert first == second
    [rec] = ledger.inventory_for(D1)
    assert (rec.initial_stock, rec.current_stock, rec.market_rate) == (20, 20, 420)


@pytest.mark.parametrize("k", [0, 1, 37.5, 100])
def test_f3_consumption_within_stock(ledger, k) -> None:
    """F3: current_stock after intake(q) then consume(k) is q - k."""
    ledger.intake("Tomatoes", 100, "trays", 20, D1)
    assert ledger.inventory.apply_consumption("Tomatoes", k, D1) is True
    assert ledger.inventory.get("Tomatoes", D1).current_stock == pytest.approx(100 - k)


def test_f4_overselling_goes_negative_without_error(ledger) -> None:
    """F4: consuming more than was taken in is recorded, not clamped."""
    ledger.intake("Tomatoes", 10, "trays", 20, D1)
    ledger.inventory.apply_consumption("Tomatoes", 15, D1)
    assert ledger.inventory.get("Tomatoes", D1).current_stock == -5


def test_f5_consumption_without_record_is_a_noop(ledger) -> None:
    """F5: no matching record returns False and creates nothing."""
    assert ledger.inventory.apply_consumption("Cabbage", 3, D1) is False
    assert ledger.inventory_for(D1) == []


def test_f6_get_by_date_orders_by_commodity(ledger) -> None:
    """F6: records for a date come back sorted by commodity name."""
    for name in ("Potatoes", "carrots", "Onions"):
        ledger.intake(name, 10, "kg", 5, D1)
    ledger.intake("Apples", 10, "kg", 5, D2)
    assert [r.commodity for r in ledger.inventory_for(D1)] == ["carrots", "Onions", "Potatoes"]


def test_f7_inventory_value(ledger) -> None:
    """F7: value is the sum of current_stock × market_rate for the day."""
    ledger.intake("Tomatoes", 10, "trays", 20, D1)
    ledger.intake("Onions", 2, "sacks", 400, D1)
    ledger.inventory.apply_consumption("Tomatoes", 4, D1)
    assert ledger.inventory.inventory_value(D1) == 6 * 20 + 2 * 400
    assert ledger.inventory.inventory_value(D2) == 0.0


@pytest.mark.parametrize(
    "args, field",
    [
        (("", 10, "kg", 1, D1), "commodity"),
        (("Tomatoes", -1, "trays", 1, D1), "initial_stock"),
        (("Tomatoes", 10, "trays", -2, D1), "market_rate"),
        (("Tomatoes", 10, " ", 2, D1), "unit"),
        (("Tomatoes", 10, "trays", 2, "01/01/2024"), "date"),
    ],
)
def test_f8_intake_validation(ledger, args, field) -> None:
    """F8: bad intake arguments raise ValidationError naming the field."""
    with pytest.raises(ValidationError) as exc:
        ledger.inventory.intake(*args)
    assert exc.value.field == field


# ---------------------------------------------------------------------------
# Suite G – carry-over
# ---------------------------------------------------------------------------


def test_g1_carry_over_moves_leftovers_only(ledger) -> None:
    """G1: one record per commodity with stock left; zero/negative leftovers skipped."""
    ledger.intake("Tomatoes", 100, "trays", 20, D1)
    ledger.intake("Onions", 10, "sacks", 400, D1)
    ledger.intake("Carrots", 5, "kg", 30, D1)
    ledger.inventory.apply_consumption("Tomatoes", 70, D1)
    ledger.inventory.apply_consumption("Onions", 10, D1)
    ledger.inventory.apply_consumption("Carrots", 8, D1)

    created = ledger.carry_over(D1, D2)

    assert [r.commodity for r in created] == ["Tomatoes"]
    [rec] = ledger.inventory_for(D2)
    assert rec.commodity == "Tomatoes"
    assert rec.initial_stock == rec.current_stock == 30
    assert rec.carry_over_from_date == D1
    assert (rec.unit, rec.market_rate) == ("trays", 20)
    # source day untouched
    assert ledger.inventory.get("Tomatoes", D1).current_stock == 30


def test_g2_carry_over_overwrites_existing_target(ledger) -> None:
    """G2: carrying onto a day that already has the commodity replaces it."""
    ledger.intake("Tomatoes", 12, "trays", 20, D1)
    ledger.intake("Tomatoes", 99, "trays", 22, D2)
    ledger.carry_over(D1, D2)
    rec = ledger.inventory.get("Tomatoes", D2)
    assert rec.initial_stock == 12
    assert rec.carry_over_from_date == D1


def test_g3_carry_over_from_empty_day(ledger) -> None:
    """G3: nothing on the source day creates nothing."""
    assert ledger.carry_over(D1, D2) == []
    assert ledger.inventory_for(D2) == []


def test_g4_carry_over_rejects_bad_dates(ledger) -> None:
    """G4: same-day or malformed dates are rejected."""
    with pytest.raises(ValidationError):
        ledger.carry_over(D1, D1)
    with pytest.raises(ValidationError):
        ledger.carry_over("2024-13-01", D2)
