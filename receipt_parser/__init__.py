"""Receipt Parser.

A deterministic extraction engine that turns noisy OCR text and optional
fiscal QR payloads from photographed retail receipts into structured
records: store name, transaction date, total amount, and currency.
"""

__version__ = "1.0.0"
