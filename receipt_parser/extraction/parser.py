"""Parse orchestration: composes the field extractors into one record."""

from collections.abc import Callable
from datetime import datetime

from receipt_parser.models import ParsedReceipt
from receipt_parser.utils.config import ParserConfig
from receipt_parser.utils.logger import get_logger

from .currency import detect_currency
from .dates import extract_date
from .fiscal_qr import parse_fiscal_qr
from .lines import normalize_lines
from .store_name import extract_store_name
from .total import extract_total

logger = get_logger(__name__)


class ReceiptParser:
    """Deterministic receipt parser.

    Each field is extracted independently from the same OCR text. When a
    fiscal QR payload decodes, its signed timestamp replaces the OCR date.
    The parser holds configuration only, so one instance can be shared.

    Args:
        config: Fallback values and limits. Defaults to ``ParserConfig()``.
        clock: Source of "now" for receipts without a readable date.
    """

    def __init__(
        self,
        config: ParserConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or ParserConfig()
        self.clock = clock

    def parse(self, raw_text: str, qr_payload: str | None = None) -> ParsedReceipt:
        """Extract store name, date, total, and currency from OCR text.

        Args:
            raw_text: Full OCR output, one printed line per text line.
            qr_payload: Decoded fiscal QR string, or ``None`` if the image
                had no QR code.

        Returns:
            The parsed receipt. Fields that could not be found hold their
            defaults rather than raising.
        """
        lines = normalize_lines(raw_text)

        store_name = extract_store_name(
            lines,
            window=self.config.store_name_window,
            fallback=self.config.unknown_store_name,
        )
        total = extract_total(lines)
        currency = detect_currency(raw_text, default=self.config.default_currency)
        date = extract_date(lines, now=self.clock)

        if qr_payload is not None:
            fiscal = parse_fiscal_qr(qr_payload)
            if fiscal is not None:
                logger.debug("Using fiscal QR date from %s", fiscal.terminal_id)
                date = fiscal.date
            else:
                logger.debug("QR payload present but not a fiscal receipt code")

        logger.debug(
            "Parsed %d lines: store=%r total=%.2f currency=%s",
            len(lines),
            store_name,
            total,
            currency,
        )
        return ParsedReceipt(
            store_name=store_name,
            date=date,
            total=total,
            currency=currency,
            raw_text=raw_text,
        )


def parse(raw_text: str, qr_payload: str | None = None) -> ParsedReceipt:
    """Parse a receipt with the default configuration."""
    return ReceiptParser().parse(raw_text, qr_payload)
