"""Placement of the point detail popup.

The popup is drawn above the clicked marker and kept inside the horizontal
bounds of its container. Only the top edge is guarded vertically: a popup
that would clip above the container is flipped below the click point, and
nothing prevents it from running past the bottom edge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from border_core.charts import ChartFrame
from border_core.data import DataPoint


@dataclass(frozen=True)
class TooltipLayout:
    width: float = 300
    height: float = 250
    margin: float = 10
    flip_offset: float = 30
    fallback_offset: float = 150


@dataclass(frozen=True)
class TooltipPosition:
    left: float
    top: float


@dataclass(frozen=True)
class TooltipState:
    point: Optional[DataPoint] = None
    position: Optional[TooltipPosition] = None

    @property
    def is_open(self) -> bool:
        return self.point is not None


CLOSED = TooltipState()


def position_tooltip(
    click_x: float,
    click_y: float,
    container_width: Optional[float],
    layout: TooltipLayout = TooltipLayout(),
) -> TooltipPosition:
    if container_width is None:
        return TooltipPosition(left=click_x, top=click_y - layout.fallback_offset)

    left = click_x
    top = click_y - layout.height - layout.margin

    if left < layout.margin:
        left = layout.margin
    if left + layout.width > container_width - layout.margin:
        left = container_width - layout.width - layout.margin

    if top < layout.margin:
        top = click_y + layout.flip_offset

    return TooltipPosition(left=left, top=top)


def project_point(point: DataPoint, frame: ChartFrame) -> Tuple[float, float]:
    """Pixel position of a marker inside the rendered chart container."""
    x0, x1 = frame.x_domain
    y0, y1 = frame.y_domain
    x_span = (x1 - x0) or 1
    y_span = (y1 - y0) or 1
    x = frame.axis_offset + (point.year - x0) / x_span * frame.width
    y = frame.top_offset + (1 - (point.price - y0) / y_span) * frame.height
    return x, y


def open_tooltip(point: DataPoint, frame: ChartFrame, layout: TooltipLayout = TooltipLayout()) -> TooltipState:
    click_x, click_y = project_point(point, frame)
    return TooltipState(point=point, position=position_tooltip(click_x, click_y, frame.container_width, layout))
