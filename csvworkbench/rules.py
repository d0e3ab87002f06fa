"""
Fixed tabular rules.

This file exists to keep the delimiter set and detection orders in one place.
"""

TARGET_ENCODING = "utf-8"
DEFAULT_DELIMITER = ","

# Scan order matters: ties go to the earliest candidate.
CSV_DELIMITER_PRIORITY = (",", ";", "\t", "|")
TEXT_DELIMITER_PRIORITY = ("\t", ",", ";", "|")

# Free text needs at least this many hits in its first line to count as delimited.
TEXT_DELIMITER_MIN_COUNT = 2

DELIMITER_NAMES = {
    "comma": ",",
    "semicolon": ";",
    "tab": "\t",
    "pipe": "|",
}
AUTO_DELIMITER = "auto"

# Runs of 2+ whitespace characters separate columns in free text.
WHITESPACE_COLUMN_PATTERN = r"\s{2,}"

BEST_EFFORT_WARNING = "PDF conversion is best-effort. Please verify the results."
