# tell_dashboard/pages/dashboard_components/group_overview.py
# GROUP OVERVIEW: KPIS, RISK DONUTS, BEFORE/AFTER & TREND

import logging

import streamlit as st

from config import settings
from data_processing import format_date_ddmmyyyy
from visualization import (plot_composite_trend_chart, plot_risk_donut,
                           render_before_after_table, render_kpi_card)
from .state import GROUP_EVENT_KEY, GROUP_VIEW_KEY, as_date, forget_widgets, get_session

logger = logging.getLogger(__name__)

VIEW_MODE_LABELS = {"full": "Full timeline", "before": "Before event", "after": "After event"}


def _on_event_date_change() -> None:
    get_session().set_event_date(st.session_state.get(GROUP_EVENT_KEY))
    forget_widgets(GROUP_VIEW_KEY)


def _on_clear_event_date() -> None:
    get_session().set_event_date(None)
    forget_widgets(GROUP_EVENT_KEY, GROUP_VIEW_KEY)


def _on_view_mode_change() -> None:
    get_session().set_view_mode(st.session_state[GROUP_VIEW_KEY])


def render_kpi_row() -> None:
    views = get_session().views
    kpis = views.kpis
    cols = st.columns(len(settings.COMPOSITE_FIELDS) + 1)
    with cols[0]:
        render_kpi_card("Total Records", kpis['total_records'], help_text="Records matching the current filters.")
    for col, field in zip(cols[1:], settings.COMPOSITE_FIELDS):
        with col:
            render_kpi_card(
                f"Avg. {settings.COMPOSITE_DISPLAY_NAMES[field]}",
                kpis['display'][field],
                sub_text=settings.COMPOSITE_SHORT_NAMES[field],
                accent_color=settings.COMPOSITE_COLORS[field],
            )


def render_risk_donuts() -> None:
    views = get_session().views
    st.subheader("Risk Distribution")
    st.caption("Thresholds split each composite's observed range into equal thirds. Lower scores indicate higher risk.")
    cols = st.columns(len(settings.COMPOSITE_FIELDS))
    for col, field in zip(cols, settings.COMPOSITE_FIELDS):
        with col:
            fig = plot_risk_donut(views.risk_buckets[field], settings.COMPOSITE_DISPLAY_NAMES[field])
            st.plotly_chart(fig, use_container_width=True)


def render_event_controls() -> None:
    session = get_session()
    st.subheader("Event Analysis")
    cols = st.columns([0.4, 0.2, 0.4])
    cols[0].date_input("Event date", value=as_date(session.event_date), format="DD/MM/YYYY",
                       key=GROUP_EVENT_KEY, on_change=_on_event_date_change)
    cols[1].button("Clear event", on_click=_on_clear_event_date, disabled=session.event_date is None)
    modes = settings.ANALYTICS.timeline_view_modes
    cols[2].radio("Timeline view", modes, index=modes.index(session.view_mode), horizontal=True,
                  format_func=VIEW_MODE_LABELS.get, key=GROUP_VIEW_KEY, on_change=_on_view_mode_change,
                  disabled=session.event_date is None)


def render_group_overview() -> None:
    session = get_session()
    views = session.views
    st.info(views.filter_summary)
    if views.filtered_records.empty:
        return

    render_kpi_row()
    st.divider()
    render_risk_donuts()
    st.divider()
    render_event_controls()
    if session.event_date:
        render_before_after_table(views.before_after, format_date_ddmmyyyy(session.event_date))

    fig = plot_composite_trend_chart(
        views.clipped_trend, "Daily Composite Averages",
        event_date=session.event_date, show_event_marker=views.show_event_marker,
        axis_domain=views.axis_domain,
    )
    st.plotly_chart(fig, use_container_width=True)
