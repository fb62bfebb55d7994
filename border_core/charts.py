from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

SELECTION_NAME = "point_select"
MARKER_COLOR = "#8884d8"
YEAR_FORMAT = "d"
PRICE_AXIS_FORMAT = "$,.0f"
PRICE_TOOLTIP_FORMAT = "$,.2f"


@dataclass(frozen=True)
class ChartFrame:
    """Plot geometry in pixels plus the explicit scale domains.

    Vega-Lite sizes the plotting area with `width`/`height`; the offsets cover
    the axis gutters (left and bottom) and the padding above and to the right
    of the plot.
    """

    width: int = 720
    height: int = 400
    axis_offset: int = 60
    top_offset: int = 20
    right_padding: int = 30
    bottom_offset: int = 50
    x_domain: Tuple[float, float] = (2000, 2025)
    y_domain: Tuple[float, float] = (0, 1000)

    @property
    def container_width(self) -> int:
        return self.axis_offset + self.width + self.right_padding

    @property
    def container_height(self) -> int:
        return self.top_offset + self.height + self.bottom_offset


def _nice_ceiling(value: float) -> float:
    if value <= 0:
        return 1.0
    magnitude = 10 ** math.floor(math.log10(value))
    return math.ceil(value / magnitude) * magnitude


def chart_frame(points: Sequence[Any], **geometry: int) -> ChartFrame:
    if not points:
        return ChartFrame(**geometry)
    years = [p.year for p in points]
    prices = [p.price for p in points]
    y_low = min(0.0, min(prices))
    return ChartFrame(
        x_domain=(min(years) - 1, max(years) + 1),
        y_domain=(y_low, _nice_ceiling(max(prices) * 1.1)),
        **geometry,
    )


def build_scatter_chart(df: pd.DataFrame, frame: ChartFrame) -> alt.Chart:
    selection = alt.selection_point(name=SELECTION_NAME, fields=["id"], on="click", empty=False)
    return (
        alt.Chart(df)
        .mark_circle(size=70, color=MARKER_COLOR)
        .encode(
            x=alt.X(
                "year:Q",
                title="Year",
                scale=alt.Scale(domain=list(frame.x_domain), nice=False, zero=False),
                axis=alt.Axis(format=YEAR_FORMAT, tickMinStep=1),
            ),
            y=alt.Y(
                "price:Q",
                title="Price (USD)",
                scale=alt.Scale(domain=list(frame.y_domain), nice=False, zero=False),
                axis=alt.Axis(format=PRICE_AXIS_FORMAT, gridDash=[3, 3]),
            ),
            opacity=alt.condition(selection, alt.value(1), alt.value(0.65)),
            tooltip=[
                alt.Tooltip("date:N", title="Date"),
                alt.Tooltip("price:Q", title="Price", format=PRICE_TOOLTIP_FORMAT),
            ],
        )
        .add_params(selection)
        .properties(width=frame.width, height=frame.height)
    )


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()
