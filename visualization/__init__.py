# tell_dashboard/visualization/__init__.py
# ROBUST & EXPLICIT PACKAGE API

"""
Initializes the visualization package, defining its public API.
This file explicitly exports all public-facing functions from its submodules,
providing a single, consistent import point for the rest of the application.
"""

# --- Core Plotting Functions from plots.py ---
from .plots import (
    set_plotly_theme,
    create_empty_figure,
    plot_risk_donut,
    plot_composite_trend_chart,
)

# --- Custom UI Element Renderers from ui_elements.py ---
from .ui_elements import (
    load_and_inject_css,
    get_theme_color,
    render_kpi_card,
    build_before_after_frame,
    render_before_after_table,
)

# --- Define the canonical public API for the package ---
__all__ = [
    # from plots.py
    "set_plotly_theme",
    "create_empty_figure",
    "plot_risk_donut",
    "plot_composite_trend_chart",

    # from ui_elements.py
    "load_and_inject_css",
    "get_theme_color",
    "render_kpi_card",
    "build_before_after_frame",
    "render_before_after_table",
]
