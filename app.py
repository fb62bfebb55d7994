import html
from contextlib import contextmanager
from typing import Dict, Optional

import altair as alt
import pandas as pd
import streamlit as st

from border_core import data as bd
from border_core.charts import SELECTION_NAME, ChartFrame, build_scatter_chart, chart_frame
from border_core.filters import normalize_filters
from border_core.metrics_debug import compute_debug
from border_core.metrics_scatter import EMPTY_MESSAGE
from border_core.tooltip import CLOSED, TooltipState, open_tooltip

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .tooltip-anchor {position: relative;height: 0;}
        .point-tooltip {position: absolute;width: 300px;max-height: 250px;overflow-y: auto;z-index: 10;
                        background: #ffffff;border: 1px solid #d1d5db;border-radius: 8px;padding: 12px;
                        box-shadow: 0 4px 12px rgba(0,0,0,0.12);font-size: 0.9rem;color: #111827;}
        .point-tooltip .tt-price {font-weight: 700;font-size: 1.05rem;}
        .point-tooltip .tt-date {color: #6b7280;margin-bottom: 6px;}
        .app-footer {color: #6b7280;font-size: 0.85rem;border-top: 1px solid #e5e7eb;margin-top: 16px;padding-top: 8px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )


def selected_point_id(event) -> Optional[int]:
    if not event:
        return None
    picked = (event.get("selection") or {}).get(SELECTION_NAME) or []
    if not picked:
        return None
    try:
        return int(picked[0].get("id"))
    except (TypeError, ValueError):
        return None


def sync_tooltip(selected_id: Optional[int], points_by_id: Dict[int, bd.DataPoint], frame: ChartFrame) -> TooltipState:
    # An empty selection means the click landed outside every marker.
    if selected_id is None:
        st.session_state["dismissed_id"] = None
        st.session_state["tooltip"] = CLOSED
    elif selected_id != st.session_state.get("dismissed_id"):
        point = points_by_id.get(selected_id)
        st.session_state["tooltip"] = open_tooltip(point, frame) if point is not None else CLOSED
    return st.session_state.get("tooltip", CLOSED)


def render_tooltip(state: TooltipState, frame: ChartFrame):
    if not state.is_open:
        return
    detail = bd.point_detail(state.point)
    link = ""
    if detail["source_href"]:
        link = f"<div><a href='{html.escape(detail['source_href'])}' target='_blank' rel='noopener noreferrer'>Source</a></div>"
    st.markdown(
        f"""
        <div class="tooltip-anchor" style="width:{frame.container_width}px">
          <div class="point-tooltip" style="left:{state.position.left:.0f}px;top:{state.position.top - frame.container_height:.0f}px">
            <div class="tt-price">{detail['price_display']}</div>
            <div class="tt-date">{html.escape(detail['date'])} (year {detail['year']})</div>
            <div>{html.escape(detail['narrative'])}</div>
            {link}
          </div>
        </div>
        """,
        unsafe_allow_html=True,
    )
    if st.button("Close", key="close_tooltip"):
        st.session_state["dismissed_id"] = state.point.id
        st.session_state["tooltip"] = CLOSED
        st.rerun()


# ---------- UI setup ----------
st.set_page_config(page_title="Border Smuggling Price Analysis", layout="wide")
inject_base_styles()
st.title("Border Smuggling Price Analysis")
st.caption("The cost of being smuggled into the U.S. from Mexico")

with st.spinner("Loading data..."):
    load = bd.load_points()

if load.status == "error":
    st.error(load.error)
    st.stop()
if load.status == "empty":
    st.info(EMPTY_MESSAGE)
    st.stop()

# A fresh load closes whatever popup was open against the previous data.
load_token = (load.source_file, load.raw_rows, hash(load.points))
if st.session_state.get("_load_token") != load_token:
    st.session_state["_load_token"] = load_token
    st.session_state["tooltip"] = CLOSED
    st.session_state["dismissed_id"] = None

years = load.years

# ----- Sidebar: navigation + filters -----
with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Scatter", "Data Quality"], index=0)

    st.markdown("---")
    st.markdown("### Filters")
    if len(years) > 1:
        year_range = st.slider("Years", min_value=years[0], max_value=years[-1], value=(years[0], years[-1]), step=1)
    else:
        year_range = (years[0], years[0])
    price_cap = st.number_input("Max price (USD, 0 = no cap)", min_value=0.0, value=0.0, step=500.0)
    sort_by = st.selectbox("Sort export by", ["id", "year", "price"], index=0)

filters = normalize_filters(
    {
        "year_min": year_range[0],
        "year_max": year_range[1],
        "price_max": price_cap or None,
        "sort_by": sort_by,
    },
    available_years=years,
)
ctx = bd.prepare_context(filters, load)
filtered_points = ctx["filtered_points"]
filtered_frame = ctx["filtered_frame"]
year_summary = ctx["year_summary"]


# ----- Page renderers -----

def render_scatter_page():
    render_page_header("Scatter", "Home / Scatter", export_df=filtered_frame, export_name="border_prices.csv")
    frame = chart_frame(load.points)
    with card("Reported smuggling price by year"):
        if filtered_frame.empty:
            st.info("No reports match the current filters.")
        else:
            chart = build_scatter_chart(filtered_frame, frame)
            event = st.altair_chart(chart, use_container_width=False, on_select="rerun", key="scatter")
            points_by_id = {p.id: p for p in filtered_points}
            render_tooltip(sync_tooltip(selected_point_id(event), points_by_id, frame), frame)
        st.caption("Click a point for the report details; click empty space or Close to dismiss.")

    with card("Reports per year"):
        display = year_summary.copy()
        for col in ["median_price", "min_price", "max_price"]:
            display[col] = display[col].apply(bd.format_currency)
        st.dataframe(display, hide_index=True, use_container_width=True)

    st.markdown(
        f"<div class='app-footer'>Total data points: {len(load.points)}"
        f" (showing {len(filtered_points)})<br/>Data compiled manually by Luke Harold</div>",
        unsafe_allow_html=True,
    )


def render_debug_page():
    render_page_header("Data Quality", "Home / Data Quality")
    payload = compute_debug(filters, ctx)
    with card("Row counts"):
        st.write(payload["row_counts"])
        st.write(payload["missing_fields"])
    with card("Year coverage"):
        st.dataframe(pd.DataFrame(payload["year_coverage"]), hide_index=True)
    if payload["dropped_ids"]:
        with card("Dropped rows"):
            st.caption("Rows without a parseable year or price are left out of the chart.")
            st.write(payload["dropped_ids"])
    st.caption(f"Source file: {payload['source_file']}")


if nav_choice == "Scatter":
    render_scatter_page()
else:
    render_debug_page()
