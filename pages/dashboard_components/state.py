# tell_dashboard/pages/dashboard_components/state.py
# STREAMLIT SESSION BINDING FOR THE DASHBOARD STATE

import logging
from datetime import date
from typing import Optional

import streamlit as st

from analytics import DashboardSession

logger = logging.getLogger(__name__)

SESSION_KEY = "tell_dashboard_session"

# Widget keys. Popping a key makes the widget re-read its default from the session.
AGE_SLIDER_KEY = "tell_filter_age_range"
FILTER_WIDGET_KEYS = ("tell_filter_sex", AGE_SLIDER_KEY, "tell_filter_age_min", "tell_filter_age_max", "tell_filter_role")
GROUP_EVENT_KEY = "tell_event_date"
GROUP_VIEW_KEY = "tell_view_mode"
PARTICIPANT_KEY = "tell_participant"
INDIVIDUAL_EVENT_KEY = "tell_individual_event_date"
INDIVIDUAL_VIEW_KEY = "tell_individual_view_mode"
UPLOAD_KEY = "tell_upload"


def get_session() -> DashboardSession:
    """Returns this browser session's dashboard state, creating it on first use."""
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = DashboardSession()
        logger.debug("Created a new dashboard session.")
    return st.session_state[SESSION_KEY]


def forget_widgets(*keys: str) -> None:
    for key in keys:
        st.session_state.pop(key, None)


def forget_all_widgets() -> None:
    """Called after a successful load or a clear, when every control returns to its default."""
    forget_widgets(*FILTER_WIDGET_KEYS, GROUP_EVENT_KEY, GROUP_VIEW_KEY,
                   PARTICIPANT_KEY, INDIVIDUAL_EVENT_KEY, INDIVIDUAL_VIEW_KEY)


def as_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None
