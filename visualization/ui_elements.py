# tell_dashboard/visualization/ui_elements.py
# THEME-AWARE UI COMPONENTS

import html
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd
import streamlit as st

from config import settings
from analytics.before_after import BeforeAfterStats, delta_direction, format_delta

logger = logging.getLogger(__name__)

@st.cache_resource
def load_and_inject_css(css_path: Union[str, Path]):
    """Loads a CSS file and injects it into the Streamlit application."""
    path = Path(css_path)
    if not path.is_file():
        logger.warning(f"CSS file not found at: {path}. UI may not be styled correctly.")
        return
    try:
        with path.open("r", encoding="utf-8") as f:
            st.markdown(f'<style>{f.read()}</style>', unsafe_allow_html=True)
        logger.debug(f"Successfully loaded and injected CSS from {path}.")
    except OSError as e:
        logger.error(f"Error loading CSS from {path}: {e}", exc_info=True)


def get_theme_color(semantic_name: str, fallback: str = "#6c757d") -> str:
    """
    Retrieves a theme color from settings using a semantic name.
    e.g., 'risk_high', 'primary', 'delta_positive'.
    """
    attr_name = f"COLOR_{semantic_name.upper()}"
    return getattr(settings, attr_name, fallback)


def render_kpi_card(
    title: str,
    value: Any,
    sub_text: Optional[str] = None,
    help_text: Optional[str] = None,
    accent_color: Optional[str] = None,
) -> None:
    """
    Renders a custom HTML KPI card. Missing values show the no-data sentinel.
    """
    sentinel = settings.ANALYTICS.no_data_sentinel
    if value is None or (isinstance(value, float) and pd.isna(value)):
        value_str = sentinel
    elif isinstance(value, float):
        value_str = f"{value:.{settings.ANALYTICS.kpi_decimals}f}"
    elif isinstance(value, int):
        value_str = f"{value:,}"
    else:
        value_str = str(value)

    tooltip_attr = f'title="{html.escape(help_text)}"' if help_text else ""
    style_attr = f'style="border-left-color: {accent_color};"' if accent_color else ""
    sub_html = f'<div class="kpi-subtext">{html.escape(sub_text)}</div>' if sub_text else ""

    card_html = f"""
    <div class="kpi-card" {tooltip_attr} {style_attr}>
        <div class="kpi-title">{html.escape(title)}</div>
        <p class="kpi-value">{html.escape(value_str)}</p>
        {sub_html}
    </div>
    """
    st.markdown(card_html, unsafe_allow_html=True)


def build_before_after_frame(table: Optional[Dict[str, BeforeAfterStats]]) -> pd.DataFrame:
    """Flattens a before/after table into display rows: Composite, Before, After, Delta."""
    sentinel = settings.ANALYTICS.no_data_sentinel
    if not table:
        return pd.DataFrame(columns=['Composite', 'Before', 'After', 'Delta'])
    rows = []
    for field, stats in table.items():
        rows.append({
            'Composite': settings.COMPOSITE_DISPLAY_NAMES.get(field, field),
            'Before': sentinel if stats.avg_before is None else f"{stats.avg_before:.1f} (n={stats.n_before})",
            'After': sentinel if stats.avg_after is None else f"{stats.avg_after:.1f} (n={stats.n_after})",
            'Delta': format_delta(stats),
        })
    return pd.DataFrame(rows)


def render_before_after_table(table: Optional[Dict[str, BeforeAfterStats]], event_label: str) -> None:
    """Renders the before/after comparison with the delta column coloured by direction."""
    if not table:
        st.info("Select an event date to compare composites before and after it.")
        return
    frame = build_before_after_frame(table)
    colors = {
        'up': get_theme_color('delta_positive'),
        'down': get_theme_color('delta_negative'),
        'flat': get_theme_color('text_muted'),
    }
    directions = [delta_direction(stats) for stats in table.values()]

    def _color_delta(column: pd.Series):
        if column.name != 'Delta':
            return [''] * len(column)
        return [f'color: {colors[d]}; font-weight: 600' for d in directions]

    st.caption(f"Before vs. after {event_label}")
    st.dataframe(frame.style.apply(_color_delta), hide_index=True, use_container_width=True)
