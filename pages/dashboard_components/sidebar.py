# tell_dashboard/pages/dashboard_components/sidebar.py
# DATA LOADING & FILTER CONTROLS

import logging
from pathlib import Path

import streamlit as st

from config import settings
from .state import AGE_SLIDER_KEY, FILTER_WIDGET_KEYS, UPLOAD_KEY, forget_all_widgets, forget_widgets, get_session

logger = logging.getLogger(__name__)

SEX_LABELS = {"all": "All", "male": "Male", "female": "Female", "blank": "Blank (no data)"}


@st.cache_data(ttl=settings.WEB_CACHE_TTL_SECONDS, show_spinner="Reading sample records...")
def read_sample_bytes(path: str) -> bytes:
    """Reads (and caches) the bundled sample JSON file."""
    return Path(path).read_bytes()


def _on_upload() -> None:
    uploaded = st.session_state.get(UPLOAD_KEY)
    if uploaded is None:
        return
    session = get_session()
    if session.load_json(uploaded.getvalue()):
        logger.info(f"Loaded uploaded file '{uploaded.name}'.")
        forget_all_widgets()


def _on_load_sample() -> None:
    path = settings.SAMPLE_DATA_PATH
    if not path or not Path(path).is_file():
        st.session_state['tell_sample_missing'] = True
        logger.warning(f"Sample data file not found at {path}. Run generate_data.py to create it.")
        return
    st.session_state['tell_sample_missing'] = False
    if get_session().load_json(read_sample_bytes(str(path))):
        forget_all_widgets()


def _on_clear() -> None:
    get_session().clear_data()
    forget_all_widgets()


def _on_filter_change() -> None:
    session = get_session()
    session.set_filters(
        sex=st.session_state.get("tell_filter_sex", session.filters.sex),
        role=st.session_state.get("tell_filter_role", session.filters.role),
    )


def _on_age_bound_change(field: str) -> None:
    session = get_session()
    widget_key = f"tell_filter_{field}"
    session.set_filters(**{field: int(st.session_state[widget_key])})
    st.session_state[widget_key] = getattr(session.filters, field)
    forget_widgets(AGE_SLIDER_KEY)


def _on_age_slider_change() -> None:
    age_min, age_max = st.session_state[AGE_SLIDER_KEY]
    get_session().set_filters(age_min=int(age_min), age_max=int(age_max))
    forget_widgets("tell_filter_age_min", "tell_filter_age_max")


def _on_reset_filters() -> None:
    get_session().reset_filters()
    forget_widgets(*FILTER_WIDGET_KEYS)


def render_data_controls() -> None:
    session = get_session()
    st.sidebar.header("📂 Data")
    st.sidebar.file_uploader("Upload TELL records (JSON)", type=["json"], key=UPLOAD_KEY, on_change=_on_upload)
    cols = st.sidebar.columns(2)
    cols[0].button("Load sample", on_click=_on_load_sample, use_container_width=True)
    cols[1].button("Clear data", on_click=_on_clear, use_container_width=True, disabled=not session.json_loaded)

    if session.load_error:
        st.sidebar.error(session.load_error)
    if st.session_state.get('tell_sample_missing'):
        st.sidebar.warning("Sample data not found. Run `python generate_data.py` first.")
    if session.json_loaded:
        st.sidebar.caption(f"{len(session.records):,} records loaded.")


def render_filter_controls() -> None:
    session = get_session()
    views = session.views
    filters = session.filters
    st.sidebar.header("🔎 Filters")

    sex_options = [s for s in settings.FILTERS.sex_options if s != "blank" or views.has_blank_sex]
    if filters.sex not in sex_options:
        sex_options.append(filters.sex)
    st.sidebar.radio("Sex", sex_options, index=sex_options.index(filters.sex),
                     format_func=SEX_LABELS.get, key="tell_filter_sex", on_change=_on_filter_change)

    st.sidebar.slider("Age range", min_value=settings.FILTERS.age_min, max_value=settings.FILTERS.age_max,
                      value=(filters.age_min, filters.age_max), key=AGE_SLIDER_KEY, on_change=_on_age_slider_change)
    age_cols = st.sidebar.columns(2)
    age_cols[0].number_input("Min age", min_value=settings.FILTERS.age_min, max_value=settings.FILTERS.age_max, step=1,
                             value=filters.age_min, key="tell_filter_age_min", on_change=_on_age_bound_change,
                             args=("age_min",))
    age_cols[1].number_input("Max age", min_value=settings.FILTERS.age_min, max_value=settings.FILTERS.age_max, step=1,
                             value=filters.age_max, key="tell_filter_age_max", on_change=_on_age_bound_change,
                             args=("age_max",))

    role_options = [settings.FILTERS.all_roles_label] + views.unique_roles
    if filters.role not in role_options:
        role_options.append(filters.role)
    st.sidebar.selectbox("Role", role_options, index=role_options.index(filters.role),
                         key="tell_filter_role", on_change=_on_filter_change)

    st.sidebar.button("Reset filters", on_click=_on_reset_filters, disabled=filters.is_default, use_container_width=True)
