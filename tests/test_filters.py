from border_core.filters import ChartFilters, normalize_filters


def test_defaults():
    assert normalize_filters({}) == ChartFilters()


def test_years_clamped_to_available():
    f = normalize_filters({"year_min": 1990, "year_max": 2050}, available_years=[2019, 2020, 2023])
    assert (f.year_min, f.year_max) == (2019, 2023)


def test_reversed_ranges_are_swapped():
    f = normalize_filters({"year_min": 2022, "year_max": 2019, "price_min": 500, "price_max": 100})
    assert (f.year_min, f.year_max) == (2019, 2022)
    assert (f.price_min, f.price_max) == (100.0, 500.0)


def test_bad_values_are_dropped():
    f = normalize_filters({"year_min": "soon", "price_max": "lots", "sort_by": "color"})
    assert f.year_min is None
    assert f.price_max is None
    assert f.sort_by == "id"


def test_numeric_strings_accepted():
    f = normalize_filters({"year_min": "2020", "price_min": "250.5", "sort_by": " Price "})
    assert f.year_min == 2020
    assert f.price_min == 250.5
    assert f.sort_by == "price"
