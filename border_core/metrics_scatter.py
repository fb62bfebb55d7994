from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from border_core.charts import build_scatter_chart, chart_frame, to_vega_spec
from border_core.data import LoadResult, point_detail
from border_core.filters import ChartFilters

EMPTY_MESSAGE = "No data available."


def _metric_value(value: Optional[float]) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def compute_scatter(filters: ChartFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    load: LoadResult = ctx["load"]
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "status": load.status,
        "message": None,
        "kpis": {},
        "year_summary": [],
        "points": [],
        "charts": {},
    }
    if load.status == "error":
        payload["message"] = load.error
        return payload
    if load.status == "empty":
        payload["message"] = EMPTY_MESSAGE
        return payload

    points: List = ctx.get("filtered_points", [])
    frame_df: pd.DataFrame = ctx.get("filtered_frame", pd.DataFrame())
    summary: pd.DataFrame = ctx.get("year_summary", pd.DataFrame())

    prices = frame_df["price"] if not frame_df.empty else pd.Series(dtype=float)
    payload["kpis"] = {
        "total_points": len(load.points),
        "shown_points": len(points),
        "year_min": int(frame_df["year"].min()) if not frame_df.empty else None,
        "year_max": int(frame_df["year"].max()) if not frame_df.empty else None,
        "median_price": _metric_value(prices.median()) if not prices.empty else None,
        "min_price": _metric_value(prices.min()) if not prices.empty else None,
        "max_price": _metric_value(prices.max()) if not prices.empty else None,
    }
    payload["year_summary"] = summary.to_dict(orient="records")
    payload["points"] = [point_detail(p) for p in points]

    # Domains come from the full data set so the axes hold still while filtering.
    frame = chart_frame(load.points)
    payload["frame"] = {
        **asdict(frame),
        "container_width": frame.container_width,
    }
    payload["charts"] = {"scatter": to_vega_spec(build_scatter_chart(frame_df, frame))}
    return payload
