import logging
from typing import Optional, Tuple

import structlog
from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile

from .config import Settings, get_settings, settings
from .converters import json_to_csv, text_to_csv, xml_to_csv
from .delimiter import resolve_delimiter
from .models import CleanOptions, HealthResponse, ToolResponse, ViewResponse
from .normalize import decode_bytes, file_info, output_filename
from .preview import build_preview
from .processor import CsvProcessor
from .tabular import parse_csv


def log_renderer(debug: bool):
    """Readable console output while debugging, JSON lines otherwise."""
    if debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


# Library modules log through the stdlib; structlog renders the app's events
logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        log_renderer(settings.DEBUG),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Clean, preview and convert delimited text",
    version="0.1.0",
)

processor = CsvProcessor()

CSV_EXTENSIONS = (".csv", ".tsv", ".txt")

CONVERTERS = {
    "json": (json_to_csv, (".json",)),
    "xml": (xml_to_csv, (".xml",)),
    "text": (text_to_csv, (".txt", ".log", ".tsv")),
}


def _check_extension(filename: Optional[str], allowed: Tuple[str, ...]) -> str:
    name = filename or ""
    if not name.lower().endswith(allowed):
        raise HTTPException(
            status_code=422,
            detail=f"Only {', '.join(allowed)} files are supported",
        )
    return name


def _delimiter_option(value: Optional[str]) -> Optional[str]:
    try:
        return resolve_delimiter(value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


async def _read_text(file: UploadFile, max_bytes: int) -> Tuple[str, int]:
    raw = await file.read()
    if len(raw) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {max_bytes} byte upload limit",
        )
    decoded = decode_bytes(raw)
    logger.debug("Decoded upload", filename=file.filename, report=decoded.report)
    return decoded.text, len(raw)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/clean", response_model=ToolResponse)
async def clean_csv_file(
    file: UploadFile = File(...),
    remove_empty_rows: bool = Form(True),
    remove_empty_columns: bool = Form(True),
    trim_whitespace: bool = Form(True),
    input_delimiter: str = Form("auto"),
    output_delimiter: str = Form("comma"),
    config: Settings = Depends(get_settings),
):
    name = _check_extension(file.filename, CSV_EXTENSIONS)
    options = CleanOptions(
        remove_empty_rows=remove_empty_rows,
        remove_empty_columns=remove_empty_columns,
        trim_whitespace=trim_whitespace,
        input_delimiter=_delimiter_option(input_delimiter),
        output_delimiter=_delimiter_option(output_delimiter),
    )

    text, size = await _read_text(file, config.MAX_UPLOAD_BYTES)
    result = processor.clean(text, options)

    preview = None
    if result.success:
        preview = build_preview(processor.current_data, config.PREVIEW_ROWS_CLEAN)

    return ToolResponse(
        filename=output_filename(name, "_cleaned.csv"),
        file=file_info(name, size, file.content_type),
        result=result,
        preview=preview,
    )


@app.post("/view", response_model=ViewResponse)
async def view_csv_file(
    file: UploadFile = File(...),
    delimiter: str = Form("auto"),
    config: Settings = Depends(get_settings),
):
    name = _check_extension(file.filename, CSV_EXTENSIONS)
    delim = _delimiter_option(delimiter)

    text, size = await _read_text(file, config.MAX_UPLOAD_BYTES)
    result = processor.view(text, delim)

    preview = None
    if result.success:
        preview = build_preview(result.data, config.PREVIEW_ROWS_VIEW)

    return ViewResponse(
        file=file_info(name, size, file.content_type),
        result=result,
        preview=preview,
    )


@app.post("/convert/{source_format}", response_model=ToolResponse)
async def convert_file(
    source_format: str,
    file: UploadFile = File(...),
    config: Settings = Depends(get_settings),
):
    entry = CONVERTERS.get(source_format.lower())
    if entry is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown converter type '{source_format}'. "
            f"Supported: {', '.join(CONVERTERS)}",
        )
    convert, extensions = entry
    name = _check_extension(file.filename, extensions)

    text, size = await _read_text(file, config.MAX_UPLOAD_BYTES)
    result = convert(text)

    preview = None
    if result.success:
        preview = build_preview(parse_csv(result.data), config.PREVIEW_ROWS_CONVERT)
    else:
        logger.warning("Conversion failed", filename=name, error=result.error)

    return ToolResponse(
        filename=output_filename(name, ".csv"),
        file=file_info(name, size, file.content_type),
        result=result,
        preview=preview,
    )
