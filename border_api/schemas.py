from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ChartFiltersModel(BaseModel):
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    sort_by: str = "id"


class TooltipRequest(BaseModel):
    click_x: float
    click_y: float
    container_width: Optional[float] = Field(default=None, examples=[1000])


class TooltipPositionResponse(BaseModel):
    left: float
    top: float


class PointDetailResponse(BaseModel):
    id: int
    year: int
    price: float
    price_display: str
    date: str
    narrative: str
    source: Optional[str] = None
    source_href: Optional[str] = None


class MetaYearsResponse(BaseModel):
    years: List[int]


class HealthResponse(BaseModel):
    ok: bool = True
