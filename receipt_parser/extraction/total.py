"""Grand total extraction.

POS layouts print the total either as ``TOTAL 5,400.00`` on one line or as
a two-column table that OCR reads column by column, so all labels come out
first and their values several lines later. Two strategies cover both
layouts and are tried in order.
"""

from collections.abc import Callable

from receipt_parser.utils.logger import get_logger

from .amounts import extract_last_amount, is_number_only

logger = get_logger(__name__)

TOTAL_LABEL = "TOTAL"

# Words directly after TOTAL that mark a tax or subtotal breakdown line.
TOTAL_MODIFIERS: tuple[str, ...] = ("TAX", "A-EX", "B-18", "HT", "TTC", "TVA", "NET")

# Labels that may sit between the bare TOTAL label and its value block.
_EXACT_LABELS: frozenset[str] = frozenset({"CASH", "ITEMS NUMBER"})
_LABEL_FRAGMENTS: tuple[str, ...] = ("TAX", "CASHIER", "RCVD", "CHAN", "PAY")


def _is_breakdown(upper_line: str) -> bool:
    tail = upper_line[len(TOTAL_LABEL) :].strip()
    return tail.startswith(TOTAL_MODIFIERS)


def _is_label_line(upper_line: str) -> bool:
    return (
        upper_line.startswith(TOTAL_LABEL)
        or upper_line in _EXACT_LABELS
        or any(fragment in upper_line for fragment in _LABEL_FRAGMENTS)
    )


def find_same_line_total(lines: list[str]) -> float | None:
    """Find a ``TOTAL`` line that carries its own amount.

    Matches ``TOTAL 5,400.00``, ``TOTAL: 5,400.00`` and
    ``TOTAL AMOUNT 5,400``; skips ``TOTAL TAX 823.73``, ``TOTAL B-18% ...``
    and a bare ``TOTAL``.

    Args:
        lines: Normalized receipt lines.

    Returns:
        The first positive amount on a qualifying line, or ``None``.
    """
    for line in lines:
        stripped = line.strip()
        upper = stripped.upper()
        if not upper.startswith(TOTAL_LABEL):
            continue
        if _is_breakdown(upper):
            logger.debug("Skipping breakdown line %r", stripped)
            continue
        amount = extract_last_amount(stripped)
        if amount is not None and amount > 0:
            return amount
    return None


def find_two_column_total(lines: list[str]) -> float | None:
    """Find the total in a label-column-then-value-column layout.

    TOTAL is the first label of the block, so its value is the first
    positive numeric line after the run of label lines. Any other text
    ends the block.

    Args:
        lines: Normalized receipt lines.

    Returns:
        The amount, or ``None`` if there is no bare TOTAL label or the value
        block ends without a positive number.
    """
    label_index = next(
        (i for i, line in enumerate(lines) if line.strip().upper() == TOTAL_LABEL),
        None,
    )
    if label_index is None:
        return None

    for line in lines[label_index + 1 :]:
        stripped = line.strip()
        if is_number_only(stripped):
            amount = extract_last_amount(stripped)
            if amount is not None and amount > 0:
                return amount
            continue
        if not _is_label_line(stripped.upper()):
            logger.debug("Value block ended at %r", stripped)
            break
    return None


TOTAL_STRATEGIES: tuple[Callable[[list[str]], float | None], ...] = (
    find_same_line_total,
    find_two_column_total,
)


def extract_total(lines: list[str]) -> float:
    """Return the grand total, or ``0.0`` when it needs manual entry."""
    for strategy in TOTAL_STRATEGIES:
        amount = strategy(lines)
        if amount is not None:
            logger.debug("Total %.2f found by %s", amount, strategy.__name__)
            return amount
    logger.debug("No total found")
    return 0.0
