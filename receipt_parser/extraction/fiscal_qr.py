"""Fiscal receipt QR code decoding.

Tax-authority compliant receipts carry a QR code whose payload reads
``DDMMYYYY#HHMMSS#TERMINALID#hash#signature#signature``. Its timestamp is
machine-generated and signed, so it outranks any date read by OCR.
"""

from datetime import datetime

from receipt_parser.models import FiscalQRRecord
from receipt_parser.utils.logger import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = "#"
TIMESTAMP_FORMAT = "%d%m%Y%H%M%S"

_DATE_FIELD_LENGTH = 8
_TIME_FIELD_LENGTH = 6
_MIN_FIELDS = 3


def _is_ascii_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


def parse_fiscal_qr(payload: str) -> FiscalQRRecord | None:
    """Decode the date and terminal id from a fiscal QR payload.

    Fields after the terminal id (hashes, signatures) are ignored.

    Args:
        payload: Decoded QR string.

    Returns:
        The decoded record, or ``None`` if the payload does not have the
        expected shape or its timestamp is not a valid date.
    """
    parts = payload.split(FIELD_SEPARATOR)
    if len(parts) < _MIN_FIELDS:
        logger.debug("QR payload has %d fields, need %d", len(parts), _MIN_FIELDS)
        return None

    date_part, time_part, terminal_id = parts[0], parts[1], parts[2]
    if len(date_part) != _DATE_FIELD_LENGTH or len(time_part) != _TIME_FIELD_LENGTH:
        logger.debug("QR date/time fields have unexpected lengths")
        return None
    if not (_is_ascii_digits(date_part) and _is_ascii_digits(time_part)):
        logger.debug("QR date/time fields are not numeric")
        return None

    try:
        date = datetime.strptime(date_part + time_part, TIMESTAMP_FORMAT)
    except ValueError:
        logger.debug("QR timestamp %s%s is not a valid date", date_part, time_part)
        return None

    return FiscalQRRecord(date=date, terminal_id=terminal_id)
