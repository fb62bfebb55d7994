from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from border_core.data import NARRATIVE_PLACEHOLDER, LoadResult
from border_core.filters import ChartFilters


def compute_debug(filters: ChartFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    load: LoadResult = ctx["load"]
    frame: pd.DataFrame = ctx.get("points_frame", pd.DataFrame())
    payload = {
        "filters": asdict(filters),
        "source_file": load.source_file,
        "status": load.status,
        "error": load.error,
        "row_counts": {
            "raw_rows": int(load.raw_rows),
            "accepted_rows": len(load.points),
            "dropped_rows": int(load.raw_rows) - len(load.points),
            "shown_rows": len(ctx.get("filtered_points", [])),
        },
        "dropped_ids": load.dropped_ids,
        "year_coverage": [],
        "missing_fields": {},
    }
    if not frame.empty:
        payload["year_coverage"] = (
            frame.groupby("year")["id"].count().reset_index(name="reports").to_dict(orient="records")
        )
        payload["missing_fields"] = {
            "missing_narrative_rows": int((frame["narrative"] == NARRATIVE_PLACEHOLDER).sum()),
            "missing_source_rows": int(frame["source"].isna().sum()),
        }
    return payload
