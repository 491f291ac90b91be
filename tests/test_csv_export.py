"""
tests/test_csv_export.py
Tests for CSV rendering and the dated download name.
"""

import re

from shared.utils.csv_export import csv_response, dated_filename, to_csv


def test_header_plus_one_line_per_row():
    text = to_csv(["A", "B"], [[1, 2], [3, 4], [5, 6]])
    assert text.endswith("\n")
    assert len(text.strip("\n").split("\n")) == 4


def test_every_field_is_quoted():
    text = to_csv(["Name", "Notes"], [["Ravi", 'said "hi", left']])
    assert text == '"Name","Notes"\n"Ravi","said ""hi"", left"\n'


def test_no_rows_gives_header_only():
    assert to_csv(["Name"], []) == '"Name"\n'


def test_dated_filename():
    assert re.fullmatch(r"users-\d{4}-\d{2}-\d{2}\.csv", dated_filename("users", "csv"))


def test_csv_response_headers():
    response = csv_response("donations", ["Donor Name"], [["Asha"]])
    assert response.media_type == "text/csv"
    assert response.headers["content-disposition"].startswith("attachment; filename=donations-")
    assert response.body == b'"Donor Name"\n"Asha"\n'
