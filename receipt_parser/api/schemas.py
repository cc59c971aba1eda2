"""Pydantic request/response schemas for the FastAPI endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from receipt_parser.models import Currency


class ParseRequest(BaseModel):
    """Request schema for parsing one receipt's OCR output."""

    raw_text: str = ""
    qr_payload: str | None = None


class ReceiptItemResponse(BaseModel):
    """Response schema for a single line item."""

    name: str
    quantity: int
    unit_price: float
    total_price: float


class ParsedReceiptResponse(BaseModel):
    """Response schema for a parsed receipt."""

    store_name: str
    date: datetime
    total: float = Field(ge=0)
    formatted_total: str
    currency: Currency
    items: list[ReceiptItemResponse] = Field(default_factory=list)
    raw_text: str
    terminal_id: str | None = None
    processing_time_ms: float


class BatchItemResponse(BaseModel):
    """Response schema for a single item in a batch parse."""

    index: int
    result: ParsedReceiptResponse | None = None
    error: str | None = None


class BatchParseResponse(BaseModel):
    """Response schema for parsing several receipts at once."""

    success: bool
    total_receipts: int
    successful: int
    failed: int
    results: list[BatchItemResponse]


class FiscalQRRequest(BaseModel):
    """Request schema for decoding a fiscal QR payload."""

    payload: str


class FiscalQRResponse(BaseModel):
    """Response schema for a decoded fiscal QR payload."""

    valid: bool
    date: datetime | None = None
    terminal_id: str | None = None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
