# tell_dashboard/pages/dashboard_components/individual_view.py
# INDIVIDUAL PARTICIPANT VIEW

import logging

import streamlit as st

from config import settings
from data_processing import format_date_ddmmyyyy
from visualization import plot_composite_trend_chart, render_before_after_table, render_kpi_card
from .group_overview import VIEW_MODE_LABELS
from .state import (INDIVIDUAL_EVENT_KEY, INDIVIDUAL_VIEW_KEY, PARTICIPANT_KEY, as_date,
                    forget_widgets, get_session)

logger = logging.getLogger(__name__)


def _on_participant_change() -> None:
    get_session().select_participant(st.session_state.get(PARTICIPANT_KEY))


def _on_event_date_change() -> None:
    get_session().set_individual_event_date(st.session_state.get(INDIVIDUAL_EVENT_KEY))
    forget_widgets(INDIVIDUAL_VIEW_KEY)


def _on_sync_event_date() -> None:
    session = get_session()
    session.sync_individual_event_date()
    st.session_state[INDIVIDUAL_EVENT_KEY] = as_date(session.individual_event_date)
    forget_widgets(INDIVIDUAL_VIEW_KEY)


def _on_clear_event_date() -> None:
    get_session().set_individual_event_date(None)
    forget_widgets(INDIVIDUAL_EVENT_KEY, INDIVIDUAL_VIEW_KEY)


def _on_view_mode_change() -> None:
    get_session().set_individual_view_mode(st.session_state[INDIVIDUAL_VIEW_KEY])


def render_individual_view() -> None:
    session = get_session()
    views = session.views
    st.subheader("Individual Participant")
    if not views.participants:
        st.info("Load records to inspect individual participants.")
        return

    labels = {p['id']: p['label'] for p in views.participants}
    ids = list(labels)
    st.selectbox(
        "Participant", ids, index=ids.index(session.participant_id) if session.participant_id in labels else None,
        format_func=labels.get, placeholder="Select a participant...",
        key=PARTICIPANT_KEY, on_change=_on_participant_change,
    )
    participant = views.participant
    if not session.participant_id:
        return

    summary = participant.summary
    cols = st.columns(2)
    with cols[0]:
        render_kpi_card("Evaluations", summary['evaluations_display'])
    with cols[1]:
        render_kpi_card("Last Evaluation", summary['last_evaluation_date'])

    ctrl = st.columns([0.3, 0.15, 0.2, 0.35])
    ctrl[0].date_input("Individual event date", value=as_date(session.individual_event_date), format="DD/MM/YYYY",
                       key=INDIVIDUAL_EVENT_KEY, on_change=_on_event_date_change)
    ctrl[1].button("Clear", on_click=_on_clear_event_date, disabled=session.individual_event_date is None)
    ctrl[2].button("Sync with group date", on_click=_on_sync_event_date, disabled=session.event_date is None)
    modes = settings.ANALYTICS.timeline_view_modes
    ctrl[3].radio("Timeline view", modes, index=modes.index(session.individual_view_mode), horizontal=True,
                  format_func=VIEW_MODE_LABELS.get, key=INDIVIDUAL_VIEW_KEY, on_change=_on_view_mode_change,
                  disabled=session.individual_event_date is None)

    if session.individual_event_date:
        render_before_after_table(participant.before_after, format_date_ddmmyyyy(session.individual_event_date))

    fig = plot_composite_trend_chart(
        participant.clipped_timeline, f"Composite Timeline: {session.participant_id}",
        event_date=session.individual_event_date, show_event_marker=participant.show_event_marker,
        axis_domain=participant.axis_domain,
    )
    st.plotly_chart(fig, use_container_width=True)

    with st.expander("Evaluation records"):
        st.dataframe(participant.records, hide_index=True, use_container_width=True)
