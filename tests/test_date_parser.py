"""Tests for date parsing and financial year helpers."""

from datetime import date

import pytest

from deductit.utils.date_parser import (
    current_financial_year,
    financial_year_bounds,
    financial_year_for,
    format_financial_year,
    month_number,
    parse_date,
    parse_financial_year,
    parse_numeric_date,
)


def test_parse_absolute_date():
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_iso_date_is_not_day_first():
    assert parse_date("2024-07-01") == date(2024, 7, 1)


def test_parse_ambiguous_date_is_day_first():
    assert parse_date("01/07/2024") == date(2024, 7, 1)


@pytest.mark.parametrize("text", ["today", "yesterday", "last month", "July"])
def test_parse_date_rejects_words_without_a_day(text):
    with pytest.raises(ValueError):
        parse_date(text)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("01/07/2024", date(2024, 7, 1)),
        ("05/07/24", date(2024, 7, 5)),
        ("31/02/2024", None),
        ("2024-07-01", None),
    ],
)
def test_parse_numeric_date(text, expected):
    assert parse_numeric_date(text) == expected


@pytest.mark.parametrize(
    "name,expected",
    [("January", 1), ("jan", 1), ("Sept", 9), ("Dec", 12), ("ju", None), ("Foo", None)],
)
def test_month_number(name, expected):
    assert month_number(name) == expected


def test_financial_year_boundaries():
    assert financial_year_for(date(2024, 7, 1)) == 2025
    assert financial_year_for(date(2024, 6, 30)) == 2024
    assert financial_year_bounds(2025) == (date(2024, 7, 1), date(2025, 6, 30))


@pytest.mark.parametrize("label", ["FY2025", "fy 2025", "2025", 2025])
def test_parse_financial_year(label):
    assert parse_financial_year(label) == 2025


def test_parse_financial_year_rejects_other_text():
    with pytest.raises(ValueError):
        parse_financial_year("this year")


def test_format_financial_year():
    assert format_financial_year(2025) == "FY 2024-25"


def test_current_financial_year():
    assert current_financial_year(date(2025, 1, 1)) == 2025
