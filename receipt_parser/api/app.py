"""FastAPI application for the receipt parser.

Provides REST endpoints that parse OCR text already produced by a client
(e.g. a phone's on-device text recognizer), decode fiscal QR payloads, and
report health. No images are accepted.
"""

import time

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from receipt_parser import __version__
from receipt_parser.extraction.fiscal_qr import parse_fiscal_qr
from receipt_parser.extraction.parser import ReceiptParser
from receipt_parser.utils.config import load_config
from receipt_parser.utils.logger import get_logger

from .schemas import (
    BatchItemResponse,
    BatchParseResponse,
    FiscalQRRequest,
    FiscalQRResponse,
    HealthResponse,
    ParsedReceiptResponse,
    ParseRequest,
    ReceiptItemResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="Receipt Parser API",
    description="Extract store name, date, total, and currency from receipt OCR text",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_parser() -> ReceiptParser:
    """Build a parser from the current configuration."""
    return ReceiptParser(load_config().parser)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service health status."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/parse", response_model=ParsedReceiptResponse)
async def parse_receipt(request: ParseRequest) -> ParsedReceiptResponse:
    """Parse one receipt's OCR text and optional fiscal QR payload.

    Args:
        request: Raw OCR text and the decoded QR payload, if any.

    Returns:
        The structured receipt fields.
    """
    start_time = time.time()

    try:
        parser = _get_parser()
        receipt = parser.parse(request.raw_text, request.qr_payload)
        fiscal = (
            parse_fiscal_qr(request.qr_payload)
            if request.qr_payload is not None
            else None
        )

        return ParsedReceiptResponse(
            store_name=receipt.store_name,
            date=receipt.date,
            total=receipt.total,
            formatted_total=receipt.formatted_total,
            currency=receipt.currency,
            items=[
                ReceiptItemResponse(
                    name=item.name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                )
                for item in receipt.items
            ],
            raw_text=receipt.raw_text,
            terminal_id=fiscal.terminal_id if fiscal else None,
            processing_time_ms=(time.time() - start_time) * 1000,
        )

    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Parsing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/parse/batch", response_model=BatchParseResponse)
async def parse_batch(requests: list[ParseRequest]) -> BatchParseResponse:
    """Parse several receipts in one call.

    Args:
        requests: One parse request per receipt.

    Returns:
        Batch results with per-receipt outcomes.
    """
    results: list[BatchItemResponse] = []
    successful = 0

    for index, request in enumerate(requests):
        try:
            result = await parse_receipt(request)
            results.append(BatchItemResponse(index=index, result=result))
            successful += 1
        except HTTPException as exc:
            results.append(BatchItemResponse(index=index, error=exc.detail))

    return BatchParseResponse(
        success=successful > 0,
        total_receipts=len(requests),
        successful=successful,
        failed=len(requests) - successful,
        results=results,
    )


@app.post("/fiscal-qr", response_model=FiscalQRResponse)
async def decode_fiscal_qr(request: FiscalQRRequest) -> FiscalQRResponse:
    """Decode a fiscal QR payload without parsing any OCR text."""
    fiscal = parse_fiscal_qr(request.payload)
    if fiscal is None:
        return FiscalQRResponse(valid=False)
    return FiscalQRResponse(
        valid=True, date=fiscal.date, terminal_id=fiscal.terminal_id
    )
