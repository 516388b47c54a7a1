# utils/validators.py
import math
from datetime import date
from typing import Optional


def non_empty(text) -> bool:
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

    ok == False means parsing failed and value is None.
    'nan' and 'inf' count as failures.
    """
    if x is None or isinstance(x, bool):
        return False, None
    try:
        value = float(x)
    except (TypeError, ValueError):
        return False, None
    if not math.isfinite(value):
        return False, None
    return True, value


def to_float(x, default: float = 0.0) -> float:
    """Lenient numeric coercion for API payloads ('12.50', 12, None -> default)."""
    ok, val = try_parse_float(x)
    return val if ok else default  # type: ignore[return-value]


# ---- Dates ----

def parse_iso_date(s) -> Optional[date]:
    """'YYYY-MM-DD' -> date, or None when missing/invalid."""
    if not non_empty(s):
        return None
    try:
        return date.fromisoformat(str(s).strip()[:10])
    except ValueError:
        return None


def is_future_date(s, today: Optional[date] = None) -> bool:
    d = parse_iso_date(s)
    if d is None:
        return False
    return d > (today or date.today())
