"""
Delimited-text parser and serializer.

The parser is a two-state automaton driven one character at a time over
physical lines. A quoted field left open at the end of a line swallows the
next line, with a ``\\n`` inserted at the join.
"""

from __future__ import annotations

import enum
from typing import Iterable, List, Optional, Sequence

from .delimiter import detect_delimiter
from .rules import DEFAULT_DELIMITER

Row = List[str]
TabularData = List[Row]

QUOTE = '"'


class ParserState(enum.Enum):
    UNQUOTED = "unquoted"
    QUOTED = "quoted"


class _Tokenizer:
    """Field/row buffers plus the current state."""

    def __init__(self, delimiter: str):
        self.delimiter = delimiter
        self.state = ParserState.UNQUOTED
        self.field: list[str] = []
        self.row: Row = []
        self.rows: TabularData = []

    def feed_line(self, line: str) -> None:
        i = 0
        n = len(line)
        while i < n:
            char = line[i]
            if self.state is ParserState.QUOTED:
                if char == QUOTE:
                    if i + 1 < n and line[i + 1] == QUOTE:
                        # Escaped quote
                        self.field.append(QUOTE)
                        i += 1
                    else:
                        self.state = ParserState.UNQUOTED
                else:
                    self.field.append(char)
            else:
                if char == QUOTE:
                    self.state = ParserState.QUOTED
                elif char == self.delimiter:
                    self.close_field()
                else:
                    self.field.append(char)
            i += 1

    def close_field(self) -> None:
        self.row.append("".join(self.field))
        self.field = []

    def end_line(self, has_next: bool) -> None:
        if self.state is ParserState.UNQUOTED:
            self.close_field()
            self.rows.append(self.row)
            self.row = []
        elif has_next:
            # Multi-line field
            self.field.append("\n")

    def finish(self) -> TabularData:
        # Only an unterminated quote can leave anything pending here.
        if self.state is ParserState.QUOTED:
            self.close_field()
            self.rows.append(self.row)
            self.row = []
        return self.rows


def parse_csv(content: str, delimiter: Optional[str] = None) -> TabularData:
    """
    Parse delimited text into rows of string fields.

    Never raises: malformed quoting degrades to an unterminated field that
    consumes the rest of the input. A blank line yields ``[""]``.
    """
    if not delimiter:
        delimiter = detect_delimiter(content)

    tokenizer = _Tokenizer(delimiter)
    lines = content.split("\n")
    last = len(lines) - 1
    for i, line in enumerate(lines):
        tokenizer.feed_line(line)
        tokenizer.end_line(has_next=i < last)

    return tokenizer.finish()


def quote_field(field: str, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Quote *field* only if it holds the delimiter, a quote or a newline."""
    if delimiter in field or QUOTE in field or "\n" in field:
        return QUOTE + field.replace(QUOTE, QUOTE * 2) + QUOTE
    return field


def serialize_row(row: Iterable[str], delimiter: str = DEFAULT_DELIMITER) -> str:
    return delimiter.join(quote_field(field, delimiter) for field in row)


def serialize_csv(rows: Sequence[Iterable[str]], delimiter: str = DEFAULT_DELIMITER) -> str:
    """Join rows with ``\\n`` (no trailing newline) and fields with *delimiter*."""
    return "\n".join(serialize_row(row, delimiter) for row in rows)
