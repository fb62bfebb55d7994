import math

import numpy as np
import pytest

from border_core.data import (
    NARRATIVE_PLACEHOLDER,
    PRICE_COLUMN,
    DataPoint,
    extract_price,
    extract_year,
    normalize_records,
    normalize_row,
)


def _row(date, price, **extra):
    row = {"date": date, PRICE_COLUMN: price}
    row.update(extra)
    return row


@pytest.mark.parametrize("date,year", [("3/14/2019", 2019), ("12/1/2021", 2021), ("1/2/13", 13)])
def test_slash_dates_take_third_part(date, year):
    assert extract_year(date) == year


@pytest.mark.parametrize("date,year", [("2019-07-02", 2019), ("2023-10-04", 2023)])
def test_hyphen_dates_take_first_part(date, year):
    assert extract_year(date) == year


@pytest.mark.parametrize("date", ["2020/05", "1/2/3/2020", "2020-01", "2020-01-02-03", "March 2020", "", None])
def test_unparseable_dates(date):
    assert extract_year(date) is None


def test_slash_wins_over_hyphen():
    # "/" is checked first, so a two-part slash date never falls back to "-".
    assert extract_year("2020-01-02/x") is None


def test_year_reads_leading_integer():
    assert extract_year("2020-05-01") == 2020
    assert extract_year("5/1/2020 10:30") == 2020
    assert extract_year("5/1/abc") is None


def test_missing_date_value_is_nan():
    assert extract_year(float("nan")) is None


def test_price_strings_are_cleaned():
    assert extract_price("$12,500.50") == 12500.50
    assert extract_price("$1,000,000") == 1000000.0
    assert extract_price(" 900 ") == 900.0


@pytest.mark.parametrize("value", ["abc", "12abc", "$", "", "1_000", "nan", "inf", None, float("nan"), True])
def test_bad_prices(value):
    assert extract_price(value) is None


def test_numeric_prices_pass_through():
    assert extract_price(8000) == 8000.0
    assert extract_price(np.int64(42)) == 42.0
    assert extract_price(np.float64(1.5)) == 1.5


def test_normalize_row_builds_point():
    point = normalize_row(_row("3/14/2019", "$8,000", narrative="Quoted in Reynosa.", source="cbp.gov"), 4)
    assert point == DataPoint(
        id=4, year=2019, price=8000.0, date="3/14/2019", narrative="Quoted in Reynosa.", source="cbp.gov"
    )


def test_missing_narrative_and_source_defaults():
    point = normalize_row(_row("2019-07-02", 9500, narrative=float("nan"), source="  "), 0)
    assert point.narrative == NARRATIVE_PLACEHOLDER
    assert point.source is None


def test_absent_optional_columns():
    point = normalize_row(_row("2019-07-02", 9500), 0)
    assert point.narrative == NARRATIVE_PLACEHOLDER
    assert point.source is None


def test_year_zero_is_rejected():
    assert normalize_row(_row("1/1/0", 100), 0) is None
    assert normalize_row(_row("0000-01-01", 100), 0) is None


def test_rows_without_price_are_rejected():
    assert normalize_row(_row("1/1/2020", "abc"), 0) is None
    assert normalize_row({"date": "1/1/2020"}, 0) is None


def test_ids_keep_original_positions():
    records = [
        _row("1/1/2019", 100),
        _row("2020/05", 200),
        _row("2021-01-01", "abc"),
        _row("2022-01-01", "$300"),
    ]
    points = normalize_records(records)
    assert [p.id for p in points] == [0, 3]
    assert [p.year for p in points] == [2019, 2022]
    assert math.isclose(points[1].price, 300.0)


def test_normalize_records_empty():
    assert normalize_records([]) == []
