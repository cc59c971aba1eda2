"""Optional structured-extractor integration.

An external extractor (typically an on-device LLM) may do better than the
regex heuristics on store name, total, and currency, but it can be missing,
fail, or return partial data. Its usable fields are merged over the
deterministic result; the date always comes from the deterministic parser
because the fiscal QR timestamp is more reliable than any model guess.
"""

import dataclasses
import math
from typing import Protocol

from receipt_parser.models import Currency, ParsedReceipt, StructuredExtraction
from receipt_parser.utils.logger import get_logger

from .parser import ReceiptParser

logger = get_logger(__name__)


class StructuredExtractor(Protocol):
    """Anything that can turn OCR text into structured receipt fields."""

    def extract(self, raw_text: str) -> StructuredExtraction | None: ...


def merge_extraction(
    parsed: ParsedReceipt, extraction: StructuredExtraction
) -> ParsedReceipt:
    """Overlay the usable fields of an external extraction on a parsed receipt.

    A field is used only if it is valid: a non-blank store name, a finite
    non-negative total, a supported currency code. Everything else keeps the
    deterministic value.

    Args:
        parsed: Result of the deterministic parser.
        extraction: Result of the external extractor.

    Returns:
        A new receipt. ``date`` and ``raw_text`` are never replaced.
    """
    changes: dict[str, object] = {}

    if extraction.store_name and extraction.store_name.strip():
        changes["store_name"] = extraction.store_name.strip()

    total = extraction.total_amount
    if total is not None and math.isfinite(total) and total >= 0:
        changes["total"] = float(total)
    elif total is not None:
        logger.warning("Ignoring invalid extracted total: %r", total)

    currency = Currency.from_code(extraction.currency)
    if currency is not None:
        changes["currency"] = currency
    elif extraction.currency:
        logger.warning("Ignoring unsupported currency: %r", extraction.currency)

    if extraction.items:
        changes["items"] = tuple(extraction.items)

    return dataclasses.replace(parsed, **changes)


class AssistedReceiptParser:
    """Runs the deterministic parser, then merges an external extraction.

    With no extractor, or when the extractor fails or returns nothing, the
    deterministic result is returned unchanged.

    Args:
        parser: Deterministic parser. Defaults to ``ReceiptParser()``.
        extractor: Optional structured extractor.
    """

    def __init__(
        self,
        parser: ReceiptParser | None = None,
        extractor: StructuredExtractor | None = None,
    ) -> None:
        self.parser = parser or ReceiptParser()
        self.extractor = extractor

    def parse(self, raw_text: str, qr_payload: str | None = None) -> ParsedReceipt:
        """Parse a receipt, preferring the extractor's fields when usable.

        Args:
            raw_text: Full OCR output.
            qr_payload: Decoded fiscal QR string, if any.

        Returns:
            The merged receipt.
        """
        parsed = self.parser.parse(raw_text, qr_payload)
        if self.extractor is None:
            return parsed

        try:
            extraction = self.extractor.extract(raw_text)
        except Exception:
            logger.warning("Structured extraction failed, using rule-based result")
            return parsed

        if extraction is None:
            logger.info("Structured extractor unavailable, using rule-based result")
            return parsed

        return merge_extraction(parsed, extraction)
