"""
Upload ingestion: turn raw file bytes into text the converters can use.

Responsibilities:
- encoding detection + decoding
- newline normalization to LF
- download file names and display sizes
"""

from __future__ import annotations

import os
from typing import Any, Dict

from charset_normalizer import from_bytes

from .models import DecodedText, FileInfo

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def _is_utf8(encoding: str) -> bool:
    return encoding.lower().replace("-", "_") in ("utf_8", "utf8")


def decode_bytes(raw: bytes) -> DecodedText:
    """
    Decode uploaded bytes and normalize newlines to LF.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - If decode fails, fall back to UTF-8, then to replacement characters.
    - A UTF-8 BOM is stripped rather than kept as a leading character.
    """
    detected = None

    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    if raw.startswith(b"\xef\xbb\xbf") and _is_utf8(decode_used):
        decode_used = "utf-8-sig"

    decode_fallback = False

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            # Last resort: keep going with replacement characters
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
        decode_fallback = True

    # --- Newline normalization: CRLF/CR -> LF ---
    nl_before = {
        "crlf": text.count("\r\n"),
        "cr": text.count("\r") - text.count("\r\n"),
        "lf": text.count("\n") - text.count("\r\n"),
    }

    text = text.replace("\r\n", "\n").replace("\r", "\n")

    report: Dict[str, Any] = {
        "encoding": {
            "detected": detected,
            "decode_used": decode_used,
            "decode_fallback": decode_fallback,
        },
        "newlines": {
            "policy": "lf",
            "before": nl_before,
            "changed": (nl_before["crlf"] > 0) or (nl_before["cr"] > 0),
        },
    }

    return DecodedText(text=text, report=report)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"

    value = float(size)
    i = 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[i]}"


def output_filename(name: str, suffix: str = ".csv") -> str:
    """``report.json`` -> ``report.csv``; the cleaner passes ``_cleaned.csv``."""
    stem, _ = os.path.splitext(os.path.basename(name or ""))
    return (stem or "data") + suffix


def file_info(name: str, size: int, content_type: str | None = None) -> FileInfo:
    return FileInfo(
        name=name,
        size=format_file_size(size),
        type=content_type or "text/csv",
    )
