from datetime import date, datetime

import pytest

from engine.parsers import DateParser, normalize_header, parse_float, parse_int, parse_text


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-07-25", date(2024, 7, 25)),
        ("05/27/2024", date(2024, 5, 27)),
        ("25-08-2024", date(2024, 8, 25)),
        (datetime(2024, 1, 2, 9, 30), date(2024, 1, 2)),
        ("not a date", None),
        ("", None),
        (None, None),
        (float("nan"), None),
    ],
)
def test_date_parser(raw, expected):
    assert DateParser().parse(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("12", 12), ("12.9", 12), ("7 days", 7), ("1,200", 1200), ("", 0), ("n/a", 0),
     (None, 0), (float("nan"), 0), (3.7, 3), ("-4", -4)],
)
def test_parse_int(raw, expected):
    assert parse_int(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("4.25", 4.25), ("$1,000.50", 1000.5), (".5", 0.5), ("abc", 0.0), (None, 0.0),
     (float("inf"), 0.0), (2, 2.0)],
)
def test_parse_float(raw, expected):
    assert parse_float(raw) == expected


def test_parse_text():
    assert parse_text("  V1 ") == "V1"
    assert parse_text(float("nan")) == ""
    assert parse_text(None) == ""


def test_normalize_header():
    assert normalize_header("Units Sold") == normalize_header("unitsSold") == "unitssold"
    assert normalize_header("current_inventory") == "currentinventory"
