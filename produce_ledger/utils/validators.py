# utils/validators.py
from datetime import date, datetime


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None. Booleans are rejected
    so that True/False never slip through as 1/0 quantities.
    """
    if isinstance(x, bool):
        return False, None
    try:
        val = float(x)
    except (TypeError, ValueError):
        return False, None
    if val != val or val in (float("inf"), float("-inf")):
        return False, None
    return True, val


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to a float and value > 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val > 0)


# ---- Calendar / clock strings ----

def is_iso_date(s) -> bool:
    """True iff `s` is a 'YYYY-MM-DD' string naming a real calendar day."""
    if not isinstance(s, str) or len(s) != 10:
        return False
    try:
        date.fromisoformat(s)
    except ValueError:
        return False
    return True


def is_hh_mm(s) -> bool:
    """True iff `s` is a 24h 'HH:MM' wall-clock time."""
    if not isinstance(s, str):
        return False
    try:
        datetime.strptime(s, "%H:%M")
    except ValueError:
        return False
    return len(s) == 5
