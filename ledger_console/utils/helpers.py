# utils/helpers.py
from datetime import date
import logging
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    currency: Optional[str] = None,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.

    Args:
        v: Value to format; will be parsed with float(v).
        places: Number of decimal places (default: 2).
        currency: Optional prefix, e.g. "PKR" -> "PKR 1,000.00".
        strict: If True, raise on parse errors; else fall back.
        sentinel: If not None and parsing fails, return this string.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    text = f"{x:,.{places}f}"
    return f"{currency} {text}" if currency else text


def fmt_quantity(q: NumberLike) -> str:
    """1.0 -> '1', 2.5000 -> '2.5'; unparseable values are returned as-is."""
    try:
        x = float(q)
    except (TypeError, ValueError):
        return str(q)
    if x.is_integer():
        return str(int(x))
    return f"{x:f}".rstrip("0").rstrip(".")
