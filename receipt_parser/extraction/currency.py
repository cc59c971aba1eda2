"""Currency code detection over the full OCR text."""

from receipt_parser.models import Currency
from receipt_parser.utils.logger import get_logger

logger = get_logger(__name__)

# Checked in order; alphabetic tokens are case-sensitive.
CURRENCY_INDICATORS: tuple[tuple[Currency, tuple[str, ...]], ...] = (
    (Currency.RWF, ("RWF", "Frw", "FRW")),
    (Currency.KES, ("KES", "Ksh")),
    (Currency.UGX, ("UGX",)),
    (Currency.TZS, ("TZS",)),
    (Currency.USD, ("USD", "$")),
    (Currency.EUR, ("EUR", "€")),
    (Currency.GBP, ("GBP", "£")),
)


def detect_currency(text: str, default: Currency = Currency.RWF) -> Currency:
    """Return the first currency whose indicator appears anywhere in ``text``.

    Args:
        text: Raw OCR text of the whole receipt.
        default: Currency assumed when no indicator is present.
    """
    for currency, indicators in CURRENCY_INDICATORS:
        if any(indicator in text for indicator in indicators):
            return currency
    logger.debug("No currency indicator found, assuming %s", default)
    return default
