from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from border_api.schemas import (
    ChartFiltersModel,
    HealthResponse,
    MetaYearsResponse,
    PointDetailResponse,
    TooltipPositionResponse,
    TooltipRequest,
)
from border_core.data import LoadResult, load_points, point_detail, prepare_context
from border_core.filters import ChartFilters, normalize_filters
from border_core.metrics_debug import compute_debug
from border_core.metrics_scatter import compute_scatter
from border_core.tooltip import position_tooltip


app = FastAPI(title="Border Smuggling Price API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: ChartFiltersModel, *, load: LoadResult) -> ChartFilters:
    return normalize_filters(model.model_dump(), available_years=load.years)


def _load_error(load: LoadResult) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": load.error, "type": load.error_kind})


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.get("/meta/years", response_model=MetaYearsResponse)
def meta_years():
    load = load_points()
    if load.status == "error":
        return _load_error(load)
    return {"years": load.years}


@app.post("/scatter")
def scatter(filters: ChartFiltersModel):
    try:
        load = load_points()
        if load.status == "error":
            return _load_error(load)
        f = _filters_from_model(filters, load=load)
        ctx = prepare_context(f, load)
        return _json(compute_scatter(f, ctx))
    except Exception as exc:
        logger.exception("scatter failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/points/{point_id}", response_model=PointDetailResponse)
def point(point_id: int):
    load = load_points()
    if load.status == "error":
        return _load_error(load)
    for p in load.points:
        if p.id == point_id:
            return point_detail(p)
    return JSONResponse(status_code=404, content={"error": f"No data point with id {point_id}", "type": "NotFound"})


@app.post("/tooltip/position", response_model=TooltipPositionResponse)
def tooltip_position(req: TooltipRequest):
    pos = position_tooltip(req.click_x, req.click_y, req.container_width)
    return {"left": pos.left, "top": pos.top}


@app.post("/debug")
def debug(filters: ChartFiltersModel):
    try:
        load = load_points()
        f = _filters_from_model(filters, load=load)
        ctx = prepare_context(f, load)
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/export")
def export_points(filters: ChartFiltersModel):
    load = load_points()
    if load.status == "error":
        return _load_error(load)
    f = _filters_from_model(filters, load=load)
    ctx = prepare_context(f, load)
    export_df = ctx.get("filtered_frame")
    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=border_prices.csv"})
