"""
Delimiter detection.

Detection only looks at the first line of a sample and counts literal
occurrences of each candidate. The candidate with the strictly highest count
wins, so ties go to whichever candidate was scanned first.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .rules import (
    AUTO_DELIMITER,
    CSV_DELIMITER_PRIORITY,
    DEFAULT_DELIMITER,
    DELIMITER_NAMES,
    TEXT_DELIMITER_MIN_COUNT,
    TEXT_DELIMITER_PRIORITY,
)


def first_line(sample: str) -> str:
    return sample.split("\n", 1)[0]


def detect_delimiter(
    sample: str,
    candidates: Sequence[str] = CSV_DELIMITER_PRIORITY,
    default: Optional[str] = DEFAULT_DELIMITER,
    min_count: int = 1,
) -> Optional[str]:
    """
    Pick the most frequent candidate delimiter in the first line of *sample*.

    A candidate needs at least *min_count* occurrences to be considered.
    Returns *default* when nothing qualifies (including an empty sample).
    """
    line = first_line(sample)

    best = default
    best_count = 0
    for delim in candidates:
        count = line.count(delim)
        if count > best_count and count >= min_count:
            best_count = count
            best = delim

    return best


def detect_text_delimiter(text: str) -> Optional[str]:
    """Return the delimiter of already-delimited free text, or None."""
    return detect_delimiter(
        text,
        candidates=TEXT_DELIMITER_PRIORITY,
        default=None,
        min_count=TEXT_DELIMITER_MIN_COUNT,
    )


def resolve_delimiter(value: Optional[str]) -> Optional[str]:
    """
    Map a user-facing delimiter option to its character.

    ``None``, ``""`` and ``"auto"`` mean "detect" and resolve to None.
    Names (``comma``, ``tab``, ...) and the literal characters are accepted.
    """
    if value is None or value == "":
        return None
    if value in CSV_DELIMITER_PRIORITY:
        return value

    key = value.strip().lower()
    if key == AUTO_DELIMITER:
        return None
    if key not in DELIMITER_NAMES:
        raise ValueError(
            f"Unknown delimiter option '{value}'. "
            f"Supported: {AUTO_DELIMITER}, {', '.join(DELIMITER_NAMES)}"
        )
    return DELIMITER_NAMES[key]
