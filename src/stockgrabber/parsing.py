"""Numeric and date normalization helpers for upstream payload fields.

Every function here is total: malformed input degrades to a default
instead of raising, so a single bad field never blocks a whole response.
"""

import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Optional, Sequence, Union

RawNumber = Union[int, float, str, None]

# Display grouping follows the upstream market (id-ID): "." thousands, "," decimals.
_DISPLAY_SEPARATORS = str.maketrans(",.", ".,")

_MAGNITUDE_SUFFIXES = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)

_NUMERIC_CELL = re.compile(r"-?\d+\.?\d*")


def _to_float(text: str) -> float:
    try:
        number = float(text)
    except ValueError:
        return 0
    return number if math.isfinite(number) else 0


def parse_scientific(value: RawNumber) -> float:
    """Parse a decimal or scientific-notation token such as ``"1.23E+09"``.

    Numbers are returned unchanged; absent, empty or unparseable values
    become ``0``.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    return _to_float(str(value).strip())


def parse_locale_number(value: RawNumber) -> float:
    """Parse a display-formatted number such as ``"+1,234.56"``.

    Thousands commas and ``+`` signs are stripped; failures become ``0``.
    """
    if not value or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    cleaned = str(value).replace(",", "").replace("+", "").strip()
    return _to_float(cleaned)


def parse_optional_number(value: RawNumber) -> Optional[float]:
    """Like ``parse_locale_number`` but absent or unparseable values are None.

    Used where a missing figure must render differently from a real zero.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    cleaned = str(value).replace(",", "").replace("+", "").strip()
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def format_locale_number(value: float, max_decimals: int = 3) -> str:
    """Group thousands the way the upstream market displays numbers.

    Halves round away from zero (``12.5`` -> ``"13"`` with no decimals).

    Args:
        value: Number to format
        max_decimals: Maximum fraction digits kept (trailing zeros dropped)

    Returns:
        Formatted string, e.g. ``1234567.5`` -> ``"1.234.567,5"``
    """
    if not math.isfinite(value):
        return "0"
    number = Decimal(repr(abs(value)))
    context = Context(prec=max(28, number.adjusted() + max_decimals + 2))
    rounded = number.quantize(
        Decimal(1).scaleb(-max_decimals), rounding=ROUND_HALF_UP, context=context
    )
    text = f"{rounded:,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    text = text.translate(_DISPLAY_SEPARATORS)
    if value < 0 and text != "0":
        text = "-" + text
    return text


def format_price(value: float) -> str:
    """Format a price with thousands grouping and at most two decimals."""
    return format_locale_number(value, max_decimals=2)


def format_magnitude(
    value: RawNumber,
    empty: str = "0",
    scale_thousands: bool = True,
    max_decimals: int = 0,
) -> str:
    """Format a number with a K/M/B/T suffix.

    Args:
        value: Number (or raw numeric token) to format
        empty: Text rendered for zero or absent values. Broker and watchlist
            figures use ``"0"``; key statistics use ``"-"``.
        scale_thousands: Whether values below one million get a ``K`` suffix.
            Financial statement cells and key statistics keep them as
            grouped numbers.
        max_decimals: Fraction digits kept for unscaled values. Broker and
            watchlist figures are whole numbers; statement cells and key
            statistics keep up to three.

    Returns:
        Formatted string such as ``"1.23T"``, ``"-2.50K"`` or ``"950"``
    """
    number = parse_scientific(value)
    if not math.isfinite(number) or number == 0:
        return empty

    sign = "-" if number < 0 else ""
    magnitude = abs(number)
    for threshold, suffix in _MAGNITUDE_SUFFIXES:
        if suffix == "K" and not scale_thousands:
            break
        if magnitude >= threshold:
            return f"{sign}{magnitude / threshold:.2f}{suffix}"
    text = format_locale_number(magnitude, max_decimals=max_decimals)
    return text if text == "0" else sign + text


def format_ratio(value: Optional[float], decimals: int = 2) -> str:
    """Format a ratio with fixed decimals, ``"-"`` when absent."""
    if value is None:
        return "-"
    return f"{value:.{decimals}f}"


def format_percent(value: Optional[float]) -> str:
    """Format a fraction (``0.1825``) as a percentage (``"18.25%"``)."""
    if value is None:
        return "-"
    return f"{value * 100:.2f}%"


def format_compact_date(code: Any) -> Any:
    """Convert ``YYYYMMDD`` to ``YYYY-MM-DD``; anything else passes through."""
    if not isinstance(code, str) or len(code) != 8:
        return code
    return f"{code[:4]}-{code[4:6]}-{code[6:]}"


def format_cell_value(text: Optional[str]) -> str:
    """Format one financial statement cell for display.

    Pure numeric cells (commas and whitespace ignored) are scaled with
    T/B/M suffixes; any other text is returned unchanged.
    """
    if not text or text == "-":
        return "-"
    cleaned = re.sub(r"[,\s]", "", text)
    if _NUMERIC_CELL.fullmatch(cleaned):
        return format_magnitude(float(cleaned), scale_thousands=False, max_decimals=3)
    return text


def format_table_row(cells: Sequence[str]) -> list[str]:
    """Format a table row, keeping the first (label) column as-is."""
    if not cells:
        return []
    return [cells[0]] + [format_cell_value(cell) for cell in cells[1:]]
