# tell_dashboard/pages/dashboard_components/__init__.py
"""
This file makes the 'dashboard_components' directory a Python package.

It also defines the public API of this package by specifying which render
functions the dashboard page imports.
"""

from .group_overview import render_group_overview
from .individual_view import render_individual_view
from .sidebar import render_data_controls, render_filter_controls
from .state import get_session

__all__ = [
    "get_session",
    "render_data_controls",
    "render_filter_controls",
    "render_group_overview",
    "render_individual_view",
]
