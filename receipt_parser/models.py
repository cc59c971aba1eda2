"""Data records produced and consumed by the receipt parser."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class Currency(StrEnum):
    """Currency codes the parser can report."""

    RWF = "RWF"
    KES = "KES"
    UGX = "UGX"
    TZS = "TZS"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"

    @classmethod
    def from_code(cls, code: str | None) -> "Currency | None":
        """Look up a member by code, ignoring case and surrounding spaces."""
        if not code:
            return None
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class ReceiptItem:
    """A purchased line item, as reported by a structured extractor."""

    name: str
    quantity: int = 1
    unit_price: float = 0.0
    total_price: float = 0.0


@dataclass(frozen=True)
class FiscalQRRecord:
    """Transaction data decoded from a fiscal receipt QR code.

    Args:
        date: Transaction date and time encoded by the POS terminal.
        terminal_id: Identifier of the signing device (e.g. ``SDC011000805``).
    """

    date: datetime
    terminal_id: str


@dataclass(frozen=True)
class ParsedReceipt:
    """Structured fields recovered from one receipt scan.

    ``total`` is ``0.0`` when no amount was found and ``store_name`` falls
    back to a placeholder, so every field is always populated and the
    review screen can decide what needs manual editing.
    """

    store_name: str
    date: datetime
    total: float
    currency: Currency
    raw_text: str
    items: tuple[ReceiptItem, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not math.isfinite(self.total) or self.total < 0:
            raise ValueError(f"total must be finite and non-negative: {self.total}")
        if not isinstance(self.currency, Currency):
            object.__setattr__(self, "currency", Currency(self.currency))

    @property
    def formatted_total(self) -> str:
        """Total with its currency code, e.g. ``RWF 5,400`` or ``USD 12.5``."""
        amount = f"{self.total:,.3f}".rstrip("0").rstrip(".")
        return f"{self.currency} {amount}"

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""
        return {
            "store_name": self.store_name,
            "date": self.date.isoformat(),
            "total": self.total,
            "formatted_total": self.formatted_total,
            "currency": str(self.currency),
            "items": [
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "total_price": item.total_price,
                }
                for item in self.items
            ],
            "raw_text": self.raw_text,
        }


@dataclass
class StructuredExtraction:
    """Fields returned by an external structured extractor (e.g. an LLM).

    Every field is optional because such extractors may return partial data.
    """

    store_name: str | None = None
    total_amount: float | None = None
    currency: str | None = None
    items: list[ReceiptItem] = field(default_factory=list)
