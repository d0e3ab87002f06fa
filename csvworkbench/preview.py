from __future__ import annotations

from .models import TablePreview
from .tabular import TabularData


def build_preview(data: TabularData, max_rows: int = 1000) -> TablePreview:
    """
    First row as header (blank cells named ``Column N``), then at most
    ``max_rows - 1`` body rows.
    """
    if not data:
        return TablePreview()

    shown = data[:max_rows]
    header = [cell or f"Column {i + 1}" for i, cell in enumerate(shown[0])]

    return TablePreview(
        header=header,
        rows=[list(row) for row in shown[1:]],
        total_rows=len(data),
        truncated=len(data) > max_rows,
    )
