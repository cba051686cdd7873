"""
Display helpers for analytics values (en-US conventions).

Missing or NaN inputs render as zero rather than raising, so report fields can
be passed straight through.
"""
import math
from typing import Optional


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_number(value: Optional[float]) -> str:
    """Thousands separators and at most two decimals: 1234.5 -> '1,234.5'."""
    if _is_missing(value):
        return "0"
    text = f"{value:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_currency(value: Optional[float]) -> str:
    """US dollars with two decimals: -3.5 -> '-$3.50'."""
    if _is_missing(value):
        return "$0.00"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percentage(value: Optional[float]) -> str:
    """Render a fraction as a percentage with one decimal: 0.125 -> '12.5%'."""
    if _is_missing(value):
        return "0%"
    return f"{value * 100:,.1f}%"
