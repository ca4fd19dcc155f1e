# tell_dashboard/pages/01_TELL_Dashboard.py
# TELL SCREENING DASHBOARD
# Group overview and individual participant analysis over an uploaded JSON
# record set. All state lives in one DashboardSession per browser session.

import logging

import streamlit as st

try:
    from config import settings
    from visualization import load_and_inject_css, set_plotly_theme
    from pages.dashboard_components import (get_session, render_data_controls, render_filter_controls,
                                            render_group_overview, render_individual_view)
except ImportError as e:
    st.error(f"Import Error: {e}. Please run the app from the project root with `streamlit run app.py`.")
    st.stop()

logger = logging.getLogger(__name__)


def run_dashboard():
    st.set_page_config(page_title=f"{settings.APP_NAME} - Dashboard", page_icon="🧠", layout="wide")
    load_and_inject_css(settings.STYLE_CSS_PATH)
    set_plotly_theme()

    st.title("🧠 TELL Screening Dashboard")
    st.markdown("Population-relative risk, event impact and per-participant trajectories for TELL composites.")

    # 1. Sidebar: data lifecycle and filters (callbacks update the session)
    render_data_controls()
    render_filter_controls()

    session = get_session()
    if not session.json_loaded:
        st.info("ℹ️ Upload a TELL JSON file or load the sample data from the sidebar to begin.")
        st.stop()

    # 2. Main content, rendered from the already-recomputed views
    tab_group, tab_individual = st.tabs(["👥 Group Overview", "👤 Individual View"])
    with tab_group:
        render_group_overview()
    with tab_individual:
        render_individual_view()


if __name__ == "__main__":
    run_dashboard()
