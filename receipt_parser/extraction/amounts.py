"""Numeric normalization for amounts printed on receipts.

OCR frequently inserts a space after the decimal point ("5,400. 00"), so
that artifact is collapsed before the last price-like token is read.
"""

import math
import re

_DECIMAL_SPACE = re.compile(r"(\d)\.\s+(\d)")

# Comma-grouped thousands ("12,000.50") or a plain digit run ("5400.5").
_PRICE = re.compile(
    r"[0-9]{1,3}(?:,[0-9]{3})+(?:\.[0-9]{1,2})?"
    r"|[0-9]+(?:\.[0-9]{1,2})?"
)

_NUMERIC_CHARS = frozenset("0123456789., ")


def collapse_decimal_spaces(text: str) -> str:
    """Join a decimal point to the digits after it: ``5,400. 00`` -> ``5,400.00``."""
    return _DECIMAL_SPACE.sub(r"\1.\2", text)


def extract_last_amount(text: str) -> float | None:
    """Return the rightmost price-like number in ``text``.

    Args:
        text: A single receipt line.

    Returns:
        The amount with grouping commas removed, or ``None`` when the line
        holds no number at all (as opposed to a number equal to zero) or the
        digit run is too long to be a finite amount.
    """
    normalized = collapse_decimal_spaces(text)
    matches = _PRICE.findall(normalized)
    if not matches:
        return None
    amount = float(matches[-1].replace(",", ""))
    if not math.isfinite(amount):
        return None
    return amount


def is_number_only(text: str) -> bool:
    """Check whether a line holds only digits, dots, commas, and spaces."""
    stripped = text.strip()
    return bool(stripped) and all(ch in _NUMERIC_CHARS for ch in stripped)
