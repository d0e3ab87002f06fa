"""
CSV cleaning pipeline.

Stages always run in this order, skipped ones are simply left out:
- parse
- trim whitespace
- remove empty rows
- normalize row lengths (always)
- remove empty columns
- serialize

Column emptiness is only meaningful over rectangular data, and trimming
has to come first so whitespace-only cells count as empty.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .models import CleanOptions, ConversionResult, ConversionStats, ViewResult
from .rules import TARGET_ENCODING
from .tabular import Row, TabularData, parse_csv, serialize_csv

logger = logging.getLogger(__name__)


def _is_blank(cell: Optional[str]) -> bool:
    return not cell or cell.strip() == ""


def is_row_empty(row: Row) -> bool:
    return all(_is_blank(cell) for cell in row)


def is_column_empty(data: TabularData, col_index: int) -> bool:
    return all(
        _is_blank(row[col_index] if col_index < len(row) else None)
        for row in data
    )


def trim_whitespace(data: TabularData) -> TabularData:
    return [[cell.strip() for cell in row] for row in data]


def remove_empty_rows(data: TabularData) -> TabularData:
    return [row for row in data if not is_row_empty(row)]


def normalize_row_lengths(data: TabularData) -> TabularData:
    """Pad short rows in place with empty fields up to the widest row."""
    if not data:
        return data

    max_cols = max(len(row) for row in data)
    for row in data:
        if len(row) < max_cols:
            row.extend([""] * (max_cols - len(row)))
    return data


def remove_empty_columns(data: TabularData) -> TabularData:
    if not data:
        return data

    max_cols = max(len(row) for row in data)
    keep: List[int] = [i for i in range(max_cols) if not is_column_empty(data, i)]

    return [
        [row[i] if i < len(row) else "" for i in keep]
        for row in data
    ]


def _byte_length(text: str) -> int:
    return len(text.encode(TARGET_ENCODING))


def table_stats(data: TabularData) -> ConversionStats:
    return ConversionStats(
        rows=len(data),
        columns=len(data[0]) if data else 0,
    )


def clean_table(content: str, options: CleanOptions) -> TabularData:
    data = parse_csv(content, options.input_delimiter)

    if options.trim_whitespace:
        data = trim_whitespace(data)

    if options.remove_empty_rows:
        data = remove_empty_rows(data)

    data = normalize_row_lengths(data)

    if options.remove_empty_columns:
        data = remove_empty_columns(data)

    return data


def clean_csv_rows(
    content: str, options: Optional[CleanOptions] = None
) -> Tuple[ConversionResult, Optional[TabularData]]:
    """Like ``clean_csv`` but also hands back the cleaned rows on success."""
    options = options or CleanOptions()

    try:
        data = clean_table(content, options)
        cleaned = serialize_csv(data, options.output_delimiter)
    except Exception as exc:
        logger.warning("CSV cleaning failed: %s", exc, exc_info=True)
        return ConversionResult.failure(f"CSV cleaning error: {exc}"), None

    stats = table_stats(data)
    stats.original_size = _byte_length(content)
    stats.cleaned_size = _byte_length(cleaned)

    logger.info("Cleaned CSV: %d rows, %d columns", stats.rows, stats.columns)
    return ConversionResult(success=True, data=cleaned, stats=stats), data


def clean_csv(content: str, options: Optional[CleanOptions] = None) -> ConversionResult:
    """
    Parse, clean and re-serialize *content*.

    Never raises; failures come back as ``success=False`` with an error.
    """
    result, _ = clean_csv_rows(content, options)
    return result


def view_csv(content: str, delimiter: Optional[str] = None) -> ViewResult:
    """Parse *content* for display without cleaning it."""
    try:
        data = parse_csv(content, delimiter)
    except Exception as exc:
        logger.warning("CSV parsing failed: %s", exc, exc_info=True)
        return ViewResult(success=False, error=f"CSV parsing error: {exc}")

    return ViewResult(success=True, data=data, stats=table_stats(data))
