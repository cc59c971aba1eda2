"""Transaction date extraction from receipt lines.

Patterns are tried in a fixed order, most specific first. ISO dates lead
because they are unambiguous and common on fiscal receipts.
"""

import re
from collections.abc import Callable
from datetime import datetime

from receipt_parser.utils.logger import get_logger

from .lines import normalize_lines

logger = get_logger(__name__)

DATE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII), "%Y-%m-%d"),
    (re.compile(r"\d{2}/\d{2}/\d{4}", re.ASCII), "%d/%m/%Y"),
    (re.compile(r"\d{2}-\d{2}-\d{4}", re.ASCII), "%d-%m-%Y"),
    (re.compile(r"\d{2}/\d{2}/\d{2}", re.ASCII), "%d/%m/%y"),
    (re.compile(r"\d{2}\.\d{2}\.\d{4}", re.ASCII), "%d.%m.%Y"),
)


def find_date(line: str) -> datetime | None:
    """Try each date pattern against a single line.

    Only the first occurrence of each pattern is considered. A shape that
    matches but is not a real calendar date (month 13, February 30) moves
    on to the next pattern.

    Args:
        line: One receipt line.

    Returns:
        The parsed date at midnight, or ``None``.
    """
    for pattern, fmt in DATE_PATTERNS:
        match = pattern.search(line)
        if match is None:
            continue
        try:
            return datetime.strptime(match.group(0), fmt)
        except ValueError:
            logger.debug("Rejected %r as %s", match.group(0), fmt)
    return None


def extract_date(
    lines: list[str], now: Callable[[], datetime] = datetime.now
) -> datetime:
    """Return the first date found in the receipt, scanning top to bottom.

    Args:
        lines: Normalized receipt lines.
        now: Clock used when no date is found.

    Returns:
        The transaction date, or the current time when none is printed.
    """
    for line in lines:
        found = find_date(line)
        if found is not None:
            logger.debug("Date %s found on line %r", found.date(), line)
            return found
    logger.debug("No date found, falling back to current time")
    return now()


def extract_date_from_text(
    raw_text: str, now: Callable[[], datetime] = datetime.now
) -> datetime:
    """Extract the date straight from raw OCR text.

    For callers that take the other fields from a structured extractor
    but still want the deterministic date.
    """
    return extract_date(normalize_lines(raw_text), now=now)
