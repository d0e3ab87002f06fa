import pytest
from pydantic import ValidationError

from csvworkbench.cleaning import (
    clean_csv,
    is_column_empty,
    is_row_empty,
    normalize_row_lengths,
    remove_empty_columns,
    remove_empty_rows,
    trim_whitespace,
    view_csv,
)
from csvworkbench.models import CleanOptions
from csvworkbench.processor import CsvProcessor


def test_row_and_column_emptiness():
    assert is_row_empty(["", "  ", "\t"])
    assert not is_row_empty(["", "x"])

    data = [["a", " "], ["b"]]
    assert not is_column_empty(data, 0)
    assert is_column_empty(data, 1)

def test_trim_whitespace():
    assert trim_whitespace([[" a ", "b\t"]]) == [["a", "b"]]

def test_remove_empty_rows():
    assert remove_empty_rows([["a"], [""], [" ", ""], ["b"]]) == [["a"], ["b"]]

def test_normalize_row_lengths_pads_in_place():
    data = [["a", "b", "c"], ["d"]]
    out = normalize_row_lengths(data)
    assert out == [["a", "b", "c"], ["d", "", ""]]
    assert out is data
    assert normalize_row_lengths([]) == []

def test_remove_empty_columns():
    data = [["a", "", "x"], ["b", " ", ""]]
    assert remove_empty_columns(data) == [["a", "x"], ["b", ""]]
    assert remove_empty_columns([]) == []

def test_clean_all_options():
    content = 'a,,\n,,\n" b ",c,'
    result = clean_csv(content)

    assert result.success
    assert result.data == "a,\nb,c"
    assert result.stats.rows == 2
    assert result.stats.columns == 2
    assert result.stats.original_size == len(content)
    assert result.stats.cleaned_size == len("a,\nb,c")

def test_clean_sizes_are_utf8_bytes():
    result = clean_csv("é,x")
    assert result.stats.original_size == 4

def test_clean_with_nothing_enabled_still_normalizes():
    options = CleanOptions(
        remove_empty_rows=False,
        remove_empty_columns=False,
        trim_whitespace=False,
    )
    result = clean_csv("a,b,c\n d", options)
    assert result.data == "a,b,c\n d,,"

def test_clean_whitespace_only_column_is_empty_after_trim():
    result = clean_csv("a, ,b\nc,  ,d")
    assert result.data == "a,b\nc,d"

def test_clean_whitespace_column_dropped_without_trim():
    result = clean_csv("a, ,b\nc,  ,d", CleanOptions(trim_whitespace=False))
    # Emptiness ignores whitespace even when cells are not trimmed
    assert result.data == "a,b\nc,d"

def test_clean_delimiters():
    options = CleanOptions(input_delimiter="semicolon", output_delimiter="|")
    result = clean_csv("a;b,c\n1;2", options)
    assert result.data == "a|b,c\n1|2"

def test_clean_quotes_output_fields():
    result = clean_csv("a;b,c", CleanOptions(input_delimiter=";", output_delimiter="comma"))
    assert result.data == 'a,"b,c"'

def test_clean_empty_input():
    result = clean_csv("")
    assert result.success
    assert result.data == ""
    assert result.stats.rows == 0
    assert result.stats.columns == 0

def test_clean_reports_failures(monkeypatch):
    def boom(content, delimiter=None):
        raise RuntimeError("boom")

    monkeypatch.setattr("csvworkbench.cleaning.parse_csv", boom)
    result = clean_csv("a,b")
    assert not result.success
    assert result.error == "CSV cleaning error: boom"
    assert result.data is None

def test_clean_options_reject_unknown_delimiter():
    with pytest.raises(ValidationError):
        CleanOptions(output_delimiter="colon")

def test_clean_options_auto_output_falls_back_to_comma():
    assert CleanOptions(output_delimiter="auto").output_delimiter == ","

def test_view_csv():
    result = view_csv("a\tb\n1\t2\t3")
    assert result.success
    assert result.data == [["a", "b"], ["1", "2", "3"]]
    assert result.stats.rows == 2
    assert result.stats.columns == 2


# -------------------------
# Processor cache
# -------------------------

def test_processor_caches_last_clean():
    processor = CsvProcessor()
    assert processor.current_data is None

    processor.clean(" a ;b\n;\n")
    assert processor.current_data == [["a", "b"]]

    processor.view("x,y")
    assert processor.current_data == [["x", "y"]]

def test_processor_keeps_cache_on_failure(monkeypatch):
    processor = CsvProcessor()
    processor.view("x,y")

    monkeypatch.setattr("csvworkbench.cleaning.parse_csv", lambda *a, **k: 1 / 0)
    result = processor.clean("a,b")
    assert not result.success
    assert processor.current_data == [["x", "y"]]

def test_processor_delegates():
    processor = CsvProcessor()
    assert processor.detect_delimiter("a|b") == "|"
    rows = processor.parse('"a|b"|c')
    assert rows == [["a|b", "c"]]
    assert processor.serialize(rows, "|") == '"a|b"|c'
