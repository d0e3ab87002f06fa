"""
Format converters: JSON, XML and free text into CSV.

Every public converter returns a ``ConversionResult`` and never raises.
Internal problems are raised as ``ConversionError`` subclasses and folded
into ``success=False`` results with a stage-specific message prefix.
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .delimiter import detect_text_delimiter
from .errors import EmptyInputError, ParseError
from .flatten import FlattenedRecord, flatten_object, records_to_rows
from .models import ConversionResult, ConversionStats
from .rules import (
    BEST_EFFORT_WARNING,
    CSV_DELIMITER_PRIORITY,
    DEFAULT_DELIMITER,
    WHITESPACE_COLUMN_PATTERN,
)
from .tabular import parse_csv, quote_field, serialize_csv

logger = logging.getLogger(__name__)

XmlValue = Union[str, Dict[str, Any]]

_WHITESPACE_COLUMNS = re.compile(WHITESPACE_COLUMN_PATTERN)

# Bound implicitly, never declared with xmlns
_WELL_KNOWN_PREFIXES = {"http://www.w3.org/XML/1998/namespace": "xml"}


def _guarded(stage: str, convert: Callable[[], ConversionResult]) -> ConversionResult:
    try:
        return convert()
    except Exception as exc:
        logger.warning("%s failed: %s", stage, exc)
        return ConversionResult.failure(f"{stage} error: {exc}")


def _records_result(records: List[FlattenedRecord]) -> ConversionResult:
    rows = records_to_rows(records)
    return ConversionResult(
        success=True,
        data=serialize_csv(rows, DEFAULT_DELIMITER),
        stats=ConversionStats(rows=len(rows) - 1, columns=len(rows[0])),
    )


def _parsed_stats(csv_content: str) -> ConversionStats:
    # Header row is not counted.
    parsed = parse_csv(csv_content)
    return ConversionStats(
        rows=len(parsed) - 1,
        columns=len(parsed[0]) if parsed else 0,
    )


# -------------------------
# JSON
# -------------------------

def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are Python extensions, not JSON
    raise ParseError(f"Invalid JSON constant {name}")


def _json_records(content: Any) -> List[FlattenedRecord]:
    if isinstance(content, (str, bytes, bytearray)):
        try:
            data = json.loads(content, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            raise ParseError(str(exc)) from exc
    else:
        data = content

    # A lone object is one record
    if not isinstance(data, list):
        data = [data]

    if not data:
        raise EmptyInputError("Empty JSON data")

    records = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(
                f"Record {i + 1} is a {type(item).__name__}, expected an object"
            )
        records.append(flatten_object(item))
    return records


def json_to_csv(content: Any) -> ConversionResult:
    """Convert JSON text (or an already-decoded value) into CSV."""
    return _guarded("JSON parsing", lambda: _records_result(_json_records(content)))


# -------------------------
# XML
# -------------------------

def qualified_name(name: str, prefixes: Optional[Mapping[str, str]] = None) -> str:
    """
    Turn ElementTree's ``{uri}local`` back into ``prefix:local``.

    Unknown URIs and the default namespace give the bare local name.
    """
    if not name.startswith("{"):
        return name

    uri, local = name[1:].split("}", 1)
    prefix = (prefixes or {}).get(uri) or _WELL_KNOWN_PREFIXES.get(uri)
    return f"{prefix}:{local}" if prefix else local


def xml_element_to_object(
    element: ET.Element, prefixes: Optional[Mapping[str, str]] = None
) -> XmlValue:
    """
    Convert an element into a nested dict.

    A leaf element (no children) becomes its trimmed text, attributes and all
    are dropped. Otherwise attributes become ``@name`` keys and children are
    keyed by tag; a repeated tag turns that key into a list. Namespaced
    names are keyed as ``prefix:local`` using *prefixes* (URI -> prefix).
    """
    children = list(element)
    if not children:
        return "".join(element.itertext()).strip()

    obj: Dict[str, Any] = {
        f"@{qualified_name(name, prefixes)}": value
        for name, value in element.attrib.items()
    }

    for child in children:
        tag = qualified_name(child.tag, prefixes)
        child_value = xml_element_to_object(child, prefixes)
        if tag in obj:
            if not isinstance(obj[tag], list):
                obj[tag] = [obj[tag]]
            obj[tag].append(child_value)
        else:
            obj[tag] = child_value

    return obj


def _parse_xml(content: str) -> Tuple[ET.Element, Dict[str, str]]:
    """Parse *content*, returning the root and the declared URI -> prefix map."""
    parser = ET.XMLPullParser(events=("start-ns", "start"))
    root = None
    prefixes: Dict[str, str] = {}

    try:
        parser.feed(content)
        parser.close()
    except ET.ParseError as exc:
        raise ParseError("Invalid XML format") from exc

    for event, payload in parser.read_events():
        if event == "start-ns":
            prefix, uri = payload
            # First declaration wins when a URI is bound more than once
            if prefix and uri not in prefixes:
                prefixes[uri] = prefix
        elif root is None:
            root = payload

    if root is None:
        raise ParseError("Invalid XML format")
    return root, prefixes


def _xml_records(content: str) -> List[FlattenedRecord]:
    root, prefixes = _parse_xml(content)

    elements = list(root)
    if not elements:
        raise EmptyInputError("No data found in XML")

    records = []
    for element in elements:
        value = xml_element_to_object(element, prefixes)
        if isinstance(value, str):
            value = {qualified_name(element.tag, prefixes): value}
        records.append(flatten_object(value))
    return records


def xml_to_csv(content: str) -> ConversionResult:
    """Convert an XML document whose root children are records into CSV."""
    return _guarded("XML parsing", lambda: _records_result(_xml_records(content)))


# -------------------------
# Free text
# -------------------------

def _text_lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def _split_whitespace_columns(line: str) -> List[str]:
    return [field.strip() for field in _WHITESPACE_COLUMNS.split(line)]


def text_to_csv_content(text: str, delimiter: Optional[str] = None) -> str:
    """
    Turn loosely delimited text into CSV text.

    Text already delimited by tab, comma, semicolon or pipe passes through
    line by line. Otherwise runs of 2+ whitespace characters split columns.
    """
    lines = _text_lines(text)

    if not delimiter:
        delimiter = detect_text_delimiter(lines[0]) if lines else None

    if delimiter in CSV_DELIMITER_PRIORITY:
        return "\n".join(lines)

    return "\n".join(
        ",".join(quote_field(field, ",") for field in _split_whitespace_columns(line))
        for line in lines
    )


def _text_result(text: str, delimiter: Optional[str]) -> ConversionResult:
    if not _text_lines(text):
        raise EmptyInputError("No text content found")

    csv_content = text_to_csv_content(text, delimiter)
    return ConversionResult(
        success=True,
        data=csv_content,
        stats=_parsed_stats(csv_content),
    )


def text_to_csv(text: str, delimiter: Optional[str] = None) -> ConversionResult:
    return _guarded("Text conversion", lambda: _text_result(text, delimiter))


# -------------------------
# Collaborator-fed formats
# -------------------------

def _spreadsheet_result(csv_text: str, sheet: Optional[str]) -> ConversionResult:
    stats = _parsed_stats(csv_text)
    stats.sheet = sheet
    return ConversionResult(success=True, data=csv_text, stats=stats)


def spreadsheet_to_csv(csv_text: str, sheet: Optional[str] = None) -> ConversionResult:
    """Wrap the CSV an external spreadsheet decoder produced for *sheet*."""
    return _guarded("Excel conversion", lambda: _spreadsheet_result(csv_text, sheet))


def _document_result(text: str, pages: Optional[int]) -> ConversionResult:
    csv_content = text_to_csv_content(text)
    stats = _parsed_stats(csv_content)
    stats.pages = pages
    return ConversionResult(
        success=True,
        data=csv_content,
        stats=stats,
        warning=BEST_EFFORT_WARNING,
    )


def document_text_to_csv(text: str, pages: Optional[int] = None) -> ConversionResult:
    """
    Tabulate text an external document extractor pulled out of a PDF.

    The extraction is lossy, so successful results always carry a warning.
    """
    return _guarded("PDF conversion", lambda: _document_result(text, pages))
