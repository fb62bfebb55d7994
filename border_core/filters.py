from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

SORT_OPTIONS = ("id", "year", "price")


@dataclass(frozen=True)
class ChartFilters:
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    sort_by: str = "id"


def _as_int(value: object) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except Exception:
        return None


def _as_float(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        out = float(value)
    except Exception:
        return None
    if out != out:
        return None
    return out


def normalize_filters(raw: dict, *, available_years: Optional[Iterable[int]] = None) -> ChartFilters:
    years: List[int] = sorted(available_years or [])

    year_min = _as_int(raw.get("year_min"))
    year_max = _as_int(raw.get("year_max"))
    if years:
        if year_min is not None:
            year_min = max(year_min, years[0])
        if year_max is not None:
            year_max = min(year_max, years[-1])
    if year_min is not None and year_max is not None and year_min > year_max:
        year_min, year_max = year_max, year_min

    price_min = _as_float(raw.get("price_min"))
    price_max = _as_float(raw.get("price_max"))
    if price_min is not None and price_max is not None and price_min > price_max:
        price_min, price_max = price_max, price_min

    sort_by = str(raw.get("sort_by") or "id").strip().lower()
    if sort_by not in SORT_OPTIONS:
        sort_by = "id"

    return ChartFilters(
        year_min=year_min,
        year_max=year_max,
        price_min=price_min,
        price_max=price_max,
        sort_by=sort_by,
    )
