from __future__ import annotations

from typing import Optional

from . import cleaning, delimiter, tabular
from .models import CleanOptions, ConversionResult, ViewResult
from .rules import DEFAULT_DELIMITER
from .tabular import TabularData


class CsvProcessor:
    """
    Convenience wrapper around the cleaning and parsing functions.

    Keeps the rows of the last successful clean/view in ``current_data``.
    The cache is informational only; nothing reads it back for correctness.
    """

    def __init__(self):
        self.current_data: Optional[TabularData] = None

    def detect_delimiter(self, content: str) -> str:
        return delimiter.detect_delimiter(content)

    def parse(self, content: str, delim: Optional[str] = None) -> TabularData:
        return tabular.parse_csv(content, delim)

    def serialize(self, data: TabularData, delim: str = DEFAULT_DELIMITER) -> str:
        return tabular.serialize_csv(data, delim)

    def clean(self, content: str, options: Optional[CleanOptions] = None) -> ConversionResult:
        result, data = cleaning.clean_csv_rows(content, options)
        if result.success:
            self.current_data = data
        return result

    def view(self, content: str, delim: Optional[str] = None) -> ViewResult:
        result = cleaning.view_csv(content, delim)
        if result.success:
            self.current_data = result.data
        return result
