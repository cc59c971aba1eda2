"""Line normalization shared by every extractor."""

import re

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def normalize_lines(raw_text: str) -> list[str]:
    """Split OCR text into trimmed, non-empty lines in reading order.

    Accepts Unix, Windows, and old Mac line breaks. Other Unicode separators
    (form feed, NEL, U+2028) stay inside their line. Empty input yields an
    empty list.
    """
    return [line.strip() for line in _LINE_BREAK.split(raw_text) if line.strip()]
