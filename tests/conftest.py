"""Shared test fixtures for the receipt parser test suite."""

from datetime import datetime
from pathlib import Path

import pytest

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0)

SAME_LINE_RECEIPT = """\
CIS Version 2.1 DEVNET
www.possoftware.com
SIMBA SUPERMARKET
KG 11 Ave, Kigali
TIN: 101234567
08/02/2026 18:54
Milk 1L            1,200.00
Bread              1,000.00
Rice 5kg           3,200.00
TOTAL TAX            823.73
TOTAL  5,400. 00
CASH               10,000.00
Frw
"""

TWO_COLUMN_RECEIPT = """\
Quick Mart Kimironko
2026-02-08 09:15:02
Sugar 2kg
Cooking Oil
TOTAL
TOTAL A-EX
TOTAL B-18%
TOTAL TAX B
CASH
ITEMS NUMBER
12,000
0.00
12,000.00
1,830.51
20,000.00
2
RWF
"""


@pytest.fixture
def fixed_clock():
    """Clock returning a constant timestamp."""
    return lambda: FIXED_NOW


@pytest.fixture
def same_line_receipt() -> str:
    """OCR text where TOTAL and its amount share a line."""
    return SAME_LINE_RECEIPT


@pytest.fixture
def two_column_receipt() -> str:
    """OCR text where labels and values were read as separate columns."""
    return TWO_COLUMN_RECEIPT


@pytest.fixture
def fiscal_qr_payload() -> str:
    """A well-formed fiscal QR payload."""
    return "08022026#185412#SDC011000805#PHGM-ASN6#TTNK-ZKI4#TTNK-ZKI4"


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
