from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from .delimiter import resolve_delimiter
from .rules import DEFAULT_DELIMITER


class CleanOptions(BaseModel):
    remove_empty_rows: bool = True
    remove_empty_columns: bool = True
    trim_whitespace: bool = True
    # None means auto-detect
    input_delimiter: Optional[str] = None
    output_delimiter: str = DEFAULT_DELIMITER

    @field_validator("input_delimiter", mode="before")
    @classmethod
    def _resolve_input(cls, value: Optional[str]) -> Optional[str]:
        return resolve_delimiter(value)

    @field_validator("output_delimiter", mode="before")
    @classmethod
    def _resolve_output(cls, value: Optional[str]) -> str:
        return resolve_delimiter(value) or DEFAULT_DELIMITER


class ConversionStats(BaseModel):
    rows: int = 0
    columns: int = 0
    original_size: Optional[int] = Field(default=None, examples=[None])
    cleaned_size: Optional[int] = Field(default=None, examples=[None])
    sheet: Optional[str] = None
    pages: Optional[int] = None


class ConversionResult(BaseModel):
    success: bool
    data: Optional[str] = None
    error: Optional[str] = None
    stats: Optional[ConversionStats] = None
    warning: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ConversionResult":
        return cls(success=False, error=error)


class ViewResult(BaseModel):
    success: bool
    data: Optional[List[List[str]]] = None
    error: Optional[str] = None
    stats: Optional[ConversionStats] = None


class TablePreview(BaseModel):
    header: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)
    total_rows: int = 0
    truncated: bool = False


class DecodedText(BaseModel):
    text: str
    report: Dict[str, Any] = Field(default_factory=dict)


class FileInfo(BaseModel):
    name: str
    size: str
    type: str = "text/csv"


class ToolResponse(BaseModel):
    filename: str
    file: FileInfo
    result: ConversionResult
    preview: Optional[TablePreview] = None


class ViewResponse(BaseModel):
    file: FileInfo
    result: ViewResult
    preview: Optional[TablePreview] = None


class HealthResponse(BaseModel):
    ok: bool = True
