from __future__ import annotations

import csv
import io
import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from border_core.filters import ChartFilters, normalize_filters

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_FILE = "border_complaints.csv"

DATE_COLUMN = "date"
PRICE_COLUMN = "price to be smuggled into U.S. (USD)"
NARRATIVE_COLUMN = "narrative"
SOURCE_COLUMN = "source"
NARRATIVE_PLACEHOLDER = "No narrative available."

POINT_COLUMNS = ["id", "year", "price", "date", "narrative", "source"]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class DataPoint:
    id: int
    year: int
    price: float
    date: str
    narrative: str = NARRATIVE_PLACEHOLDER
    source: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one load of the data file.

    `status` is "ok" when at least one row survived normalization, "empty" for
    a clean load with nothing to plot, and "error" when the file could not be
    read ("load") or parsed ("parse").
    """

    status: str
    points: Tuple[DataPoint, ...] = ()
    raw_rows: int = 0
    error: Optional[str] = None
    error_kind: Optional[str] = None
    source_file: Optional[str] = None

    @property
    def dropped_ids(self) -> List[int]:
        kept = {p.id for p in self.points}
        return [i for i in range(self.raw_rows) if i not in kept]

    @property
    def years(self) -> List[int]:
        return sorted({p.year for p in self.points})


def get_source_file() -> Path:
    return DATA_DIR / DATA_FILE


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _clean_text(value: object) -> Optional[str]:
    if _is_missing(value):
        return None
    s = str(value).strip()
    return s or None


def extract_year(value: object) -> Optional[int]:
    """Pull the year out of a "M/D/YYYY" or "YYYY-MM-DD" style date.

    Only exactly three delimited parts are accepted. The chosen part is read
    as a leading integer, so "2020 " and "2020T00" both give 2020. No range
    check is made.
    """
    date_str = "" if _is_missing(value) else str(value)
    candidate = None
    if "/" in date_str:
        parts = date_str.split("/")
        if len(parts) == 3:
            candidate = parts[2]
    elif "-" in date_str:
        parts = date_str.split("-")
        if len(parts) == 3:
            candidate = parts[0]
    if candidate is None:
        return None
    match = _LEADING_INT.match(candidate)
    if not match:
        return None
    return int(match.group(1))


def extract_price(value: object) -> Optional[float]:
    """Numeric values pass through; strings lose every "$" and "," first."""
    if isinstance(value, (bool, np.bool_)) or _is_missing(value):
        return None
    if isinstance(value, (int, float, np.number)):
        price = float(value)
    elif isinstance(value, str):
        cleaned = value.replace("$", "").replace(",", "").strip()
        if "_" in cleaned:
            return None
        try:
            price = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(price):
        return None
    return price


def normalize_row(row: Mapping[str, Any], index: int) -> Optional[DataPoint]:
    year = extract_year(row.get(DATE_COLUMN))
    price = extract_price(row.get(PRICE_COLUMN))
    # A year of 0 is rejected along with a missing one.
    if not year or price is None:
        return None
    return DataPoint(
        id=int(index),
        year=year,
        price=price,
        date=str(row.get(DATE_COLUMN)),
        narrative=_clean_text(row.get(NARRATIVE_COLUMN)) or NARRATIVE_PLACEHOLDER,
        source=_clean_text(row.get(SOURCE_COLUMN)),
    )


def normalize_records(records: Iterable[Mapping[str, Any]]) -> List[DataPoint]:
    points: List[DataPoint] = []
    for index, row in enumerate(records):
        point = normalize_row(row, index)
        if point is not None:
            points.append(point)
    return points


def rectangularize_rows(text: str) -> Tuple[List[str], List[List[str]], int]:
    """Tokenize CSV text and force every data row to the header's width.

    Long rows keep their leading fields and short rows are padded with empty
    cells, so a stray comma in free text never costs the row. Blank lines are
    skipped. Input the reader cannot tokenize (an unterminated quote, text
    after a closing quote) raises `csv.Error`.
    """
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    rows = [row for row in reader if row and not (len(row) == 1 and not row[0].strip())]
    if not rows:
        return [], [], 0
    header, body = rows[0], rows[1:]
    width = len(header)
    ragged = 0
    out: List[List[str]] = []
    for row in body:
        if len(row) > width:
            ragged += 1
            row = row[:width]
        elif len(row) < width:
            row = row + [""] * (width - len(row))
        out.append(row)
    return header, out, ragged


def parse_records(text: str) -> List[Dict[str, Any]]:
    """Parse CSV text into header-keyed records; blank lines are skipped.

    Only empty cells count as missing: words such as "None" or "N/A" in a
    narrative are kept as text.
    """
    header, rows, ragged = rectangularize_rows(text)
    if not header:
        return []
    if ragged:
        logger.info("%d rows had more fields than the header and were truncated", ragged)
    buf = io.StringIO(newline="")
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    buf.seek(0)
    df = pd.read_csv(buf, keep_default_na=False, na_values=[""])
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")


def format_currency(value: object, decimals: int = 0) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"${float(value):,.{decimals}f}"


def source_href(source: Optional[str]) -> Optional[str]:
    """Turn a bare domain into a link target; full URLs are kept as-is."""
    if not source:
        return None
    s = source.strip()
    if not s:
        return None
    if re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", s):
        return s
    return f"https://{s}"


def points_frame(points: Iterable[DataPoint]) -> pd.DataFrame:
    rows = [
        {
            "id": p.id,
            "year": p.year,
            "price": p.price,
            "date": p.date,
            "narrative": p.narrative,
            "source": p.source,
        }
        for p in points
    ]
    if not rows:
        return pd.DataFrame(columns=POINT_COLUMNS)
    return pd.DataFrame(rows, columns=POINT_COLUMNS)


def point_detail(point: DataPoint) -> Dict[str, Any]:
    return {
        "id": point.id,
        "year": point.year,
        "price": point.price,
        "price_display": format_currency(point.price, decimals=2),
        "date": point.date,
        "narrative": point.narrative,
        "source": point.source,
        "source_href": source_href(point.source),
    }


def compute_year_summary(frame: pd.DataFrame) -> pd.DataFrame:
    if frame.empty:
        return pd.DataFrame(columns=["year", "reports", "median_price", "min_price", "max_price"])
    return (
        frame.groupby("year")["price"]
        .agg(reports="count", median_price="median", min_price="min", max_price="max")
        .reset_index()
        .sort_values("year")
    )


# ---------------- Loaders ----------------
@lru_cache(maxsize=4)
def _load_points_cached(file_sig: Tuple[str, float]) -> LoadResult:
    path = Path(file_sig[0])
    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        logger.warning("could not read %s: %s", path, exc)
        return LoadResult(status="error", error=f"Error loading file: {exc}", error_kind="load", source_file=path.name)

    try:
        records = parse_records(text)
    except (csv.Error, pd.errors.ParserError) as exc:
        logger.warning("could not parse %s: %s", path, exc)
        return LoadResult(status="error", error=f"Error parsing CSV: {exc}", error_kind="parse", source_file=path.name)

    points = tuple(normalize_records(records))
    logger.info("loaded %s: %d rows, %d accepted, %d dropped", path.name, len(records), len(points), len(records) - len(points))
    return LoadResult(
        status="ok" if points else "empty",
        points=points,
        raw_rows=len(records),
        source_file=path.name,
    )


def load_points(path: Optional[Path] = None) -> LoadResult:
    path = Path(path) if path is not None else get_source_file()
    try:
        sig = file_signature(path)
    except OSError as exc:
        logger.warning("data file unavailable: %s", exc)
        return LoadResult(status="error", error=f"Error loading file: {exc}", error_kind="load", source_file=path.name)
    return _load_points_cached(sig)


def prepare_context(filters: dict | ChartFilters, load: LoadResult) -> Dict[str, object]:
    filt = filters if isinstance(filters, ChartFilters) else normalize_filters(filters, available_years=load.years)

    selected = list(load.points)
    if filt.year_min is not None:
        selected = [p for p in selected if p.year >= filt.year_min]
    if filt.year_max is not None:
        selected = [p for p in selected if p.year <= filt.year_max]
    if filt.price_min is not None:
        selected = [p for p in selected if p.price >= filt.price_min]
    if filt.price_max is not None:
        selected = [p for p in selected if p.price <= filt.price_max]
    if filt.sort_by == "year":
        selected.sort(key=lambda p: (p.year, p.id))
    elif filt.sort_by == "price":
        selected.sort(key=lambda p: (p.price, p.id))

    all_frame = points_frame(load.points)
    filtered_frame = points_frame(selected)
    return {
        "filters": filt,
        "load": load,
        "points": list(load.points),
        "filtered_points": selected,
        "points_frame": all_frame,
        "filtered_frame": filtered_frame,
        "year_summary": compute_year_summary(filtered_frame),
    }
