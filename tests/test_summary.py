"""
Tests for the read-only summaries: today, date range (with filters), all time.
"""

from __future__ import annotations

import sqlite3

import pytest

from produce_ledger.database.errors import ValidationError

DAY = "2024-01-01"


def _seed_sales(ledger, clock) -> None:
    rows = [
        ("2023-12-31T07:00:00", {"vendor_name": "Hotel Chain", "quantity": 3, "rate_per_unit": 20}),
        ("2024-01-01T06:00:00", {"vendor_name": "Market Vendor A", "commodity": "Onions", "unit": "sacks",
                                 "quantity": 2, "rate_per_unit": 400, "payment_method": "Credit"}),
        ("2024-01-01T08:00:00", {"vendor_name": "market vendor b", "quantity": 10, "rate_per_unit": 25,
                                 "payment_method": "UPI"}),
        ("2024-01-02T05:30:00", {"vendor_name": "Grocery Store", "quantity": 4, "rate_per_unit": 22,
                                 "payment_status": "pending"}),
    ]
    for ts, sale in rows:
        clock.set(ts)
        ledger.record_sale(sale)
    clock.set("2024-01-01T12:00:00")


# ---------------------------------------------------------------------------
# Suite I – todays_summary
# ---------------------------------------------------------------------------


def test_i1_intake_sale_summary_scenario(ledger) -> None:
    """I1: 100 trays in, 10 sold at 20 paid -> 10 sold, 200 earned, 90 left in stock."""
    ledger.intake("Tomatoes", 100, "trays", 20, DAY)
    ledger.record_sale({"vendor_name": "A", "quantity": 10, "rate_per_unit": 20, "payment_status": "paid"})

    s = ledger.todays_summary()
    assert s["date"] == DAY
    assert s["total_quantity_sold"] == 10
    assert s["total_money_earned"] == 200
    assert s["paid_amount"] == 200
    assert s["pending_amount"] == 0
    assert s["total_transactions"] == 1
    [tomatoes] = s["inventory"]
    assert (tomatoes.commodity, tomatoes.current_stock) == ("Tomatoes", 90)
    assert s["inventory_value"] == 90 * 20


def test_i2_collected_vs_pending_and_target(ledger, clock) -> None:
    """I2: only today's rows count; units_left follows the daily target."""
    _seed_sales(ledger, clock)
    ledger.settings.set_daily_target(15)

    s = ledger.todays_summary()
    assert s["total_quantity_sold"] == 12
    assert s["total_money_earned"] == 800 + 250
    assert s["pending_amount"] == 800
    assert s["paid_amount"] == 250
    assert s["total_transactions"] == 2
    assert s["daily_target"] == 15
    assert s["units_left"] == 3


def test_i3_units_left_never_negative(ledger) -> None:
    """I3: selling past the target reports zero left, not a negative."""
    ledger.record_sale({"vendor_name": "A", "quantity": 60, "rate_per_unit": 1})
    assert ledger.todays_summary()["units_left"] == 0


def test_i4_inventory_failure_degrades_gracefully(ledger, monkeypatch, caplog) -> None:
    """I4: if the stock join fails the sales figures still come back."""
    ledger.intake("Tomatoes", 100, "trays", 20, DAY)
    ledger.record_sale({"vendor_name": "A", "quantity": 10, "rate_per_unit": 20})

    def boom(*a, **k):
        raise sqlite3.OperationalError("no such table: Inventory")

    monkeypatch.setattr(ledger.inventory, "get_by_date", boom)
    with caplog.at_level("WARNING"):
        s = ledger.todays_summary()
    assert s["total_money_earned"] == 200
    assert s["inventory"] == []
    assert s["inventory_value"] == 0
    assert "inventory snapshot" in caplog.text


def test_i5_empty_day(ledger) -> None:
    """I5: a day with no sales reports zeros and the full target left."""
    s = ledger.summary.todays_summary("2030-05-05")
    assert s["total_transactions"] == 0
    assert s["total_money_earned"] == 0
    assert s["units_left"] == 50


# ---------------------------------------------------------------------------
# Suite J – date_range_summary
# ---------------------------------------------------------------------------


def test_j1_range_is_inclusive_and_newest_first(ledger, clock) -> None:
    """J1: both ends included; ordered by date then time descending."""
    _seed_sales(ledger, clock)
    rows = ledger.date_range_summary("2023-12-31", "2024-01-01")
    assert [(s.sale_date, s.sale_time) for s in rows] == [
        ("2024-01-01", "08:00:00"),
        ("2024-01-01", "06:00:00"),
        ("2023-12-31", "07:00:00"),
    ]


@pytest.mark.parametrize(
    "filters, vendors",
    [
        ({"commodity": "Onions"}, ["Market Vendor A"]),
        ({"payment_status": "pending"}, ["Grocery Store", "Market Vendor A"]),
        ({"payment_status": "paid"}, ["market vendor b", "Hotel Chain"]),
        ({"vendor": "MARKET vendor"}, ["market vendor b", "Market Vendor A"]),
        ({"vendor": "chain", "commodity": "Tomatoes"}, ["Hotel Chain"]),
        ({"payment_method": "UPI"}, ["market vendor b"]),
        ({"vendor": "%"}, []),
    ],
)
def test_j2_filters(ledger, clock, filters, vendors) -> None:
    """J2: commodity/status/method are exact; vendor is a case-insensitive substring."""
    _seed_sales(ledger, clock)
    rows = ledger.date_range_summary("2023-12-01", "2024-01-31", **filters)
    assert [s.vendor_name for s in rows] == vendors


def test_j3_bad_filters_rejected(ledger) -> None:
    """J3: malformed dates and unknown enum values raise ValidationError."""
    with pytest.raises(ValidationError):
        ledger.date_range_summary("2024-1-1", "2024-01-31")
    with pytest.raises(ValidationError):
        ledger.date_range_summary("2024-01-01", "2024-01-31", payment_status="partial")
    with pytest.raises(ValidationError):
        ledger.date_range_summary("2024-01-01", "2024-01-31", payment_method="Cheque")


# ---------------------------------------------------------------------------
# Suite K – all_time_summary
# ---------------------------------------------------------------------------


def test_k1_all_time_totals(ledger, clock) -> None:
    """K1: every row counts, regardless of date."""
    _seed_sales(ledger, clock)
    s = ledger.all_time_summary()
    assert s == {
        "total_quantity_sold": 19,
        "total_money_earned": 60 + 800 + 250 + 88,
        "paid_amount": 60 + 250,
        "pending_amount": 800 + 88,
        "total_transactions": 4,
    }


def test_k2_all_time_on_empty_store(ledger) -> None:
    """K2: an empty store aggregates to zeros."""
    assert ledger.all_time_summary()["total_transactions"] == 0
    assert ledger.all_time_summary()["total_money_earned"] == 0.0
