"""Store name extraction from receipt header lines.

The store name is usually the first real heading, but many POS systems
print software banners ("CIS Version...", "www.xyz.com", "Powered by...")
above it. Everything up to the first such banner line is skipped.
"""

import re

from receipt_parser.utils.logger import get_logger

from .amounts import is_number_only

logger = get_logger(__name__)

UNKNOWN_STORE = "Unknown Store"

SYSTEM_MARKERS: tuple[str, ...] = (
    "version",
    "devnet",
    "cis version",
    "pos version",
    "software",
    "www.",
    ".com",
    ".net",
    ".org",
    "http",
    "fax:",
    "powered by",
)

# Identification and metadata lines, never the business name.
_METADATA_MARKERS: tuple[str, ...] = ("tin:", "tin ", "client")

_DATE_LINE = re.compile(r"\d{2}[/\-.]\d{2}[/\-.]\d{2,4}|\d{4}-\d{2}-\d{2}", re.ASCII)
_TIME_LINE = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?", re.ASCII)
_PHONE_LINE = re.compile(r"^\+?\d[\d\s\-]{7,}", re.ASCII)

_MIN_LENGTH = 4
_MAX_LENGTH = 60
_MIN_LETTERS = 4


def _letter_count(text: str) -> int:
    return sum(1 for ch in text if ch.isalpha())


def has_system_marker(line: str) -> bool:
    """Check whether a line looks like POS/software banner text."""
    lower = line.lower()
    return any(marker in lower for marker in SYSTEM_MARKERS)


def is_date_line(text: str) -> bool:
    """Check whether a line contains a numeric date."""
    return _DATE_LINE.search(text) is not None


def is_time_line(text: str) -> bool:
    """Check whether a line is mostly a clock time such as ``18:54:12``."""
    return _TIME_LINE.search(text) is not None and _letter_count(text) < _MIN_LETTERS


def is_valid_store_name(text: str) -> bool:
    """Decide whether a header line can be the business name.

    Args:
        text: Candidate line.

    Returns:
        True if the line has a plausible length, enough letters, and is not
        a date, time, phone number, banner, or identification line.
    """
    candidate = text.strip()
    if not _MIN_LENGTH <= len(candidate) <= _MAX_LENGTH:
        return False
    if is_number_only(candidate) or is_date_line(candidate) or is_time_line(candidate):
        return False
    if _letter_count(candidate) < _MIN_LETTERS:
        return False
    if _PHONE_LINE.match(candidate):
        return False
    if has_system_marker(candidate):
        return False
    lower = candidate.lower()
    return not any(marker in lower for marker in _METADATA_MARKERS)


def extract_store_name(
    lines: list[str], window: int = 10, fallback: str = UNKNOWN_STORE
) -> str:
    """Find the store name among the header lines of a receipt.

    Args:
        lines: Normalized receipt lines, top to bottom.
        window: How many lines after the banner block to examine.
        fallback: Value returned when no line qualifies.

    Returns:
        The first qualifying line, or ``fallback``.
    """
    banner_index = next(
        (i for i, line in enumerate(lines) if has_system_marker(line)), -1
    )
    start = banner_index + 1

    for line in lines[start : start + window]:
        if is_valid_store_name(line):
            logger.debug("Store name candidate accepted: %r", line)
            return line.strip()

    logger.debug("No store name found in %d lines after index %d", window, start)
    return fallback
