# tell_dashboard/data_processing/__init__.py
# ROBUST & EXPLICIT PACKAGE API

"""
Initializes the data_processing package, defining its public API.

This file explicitly exports all public-facing functions from its submodules,
providing a single, consistent import point for the rest of the application.
"""

# --- Core Data Pipeline & Utilities from helpers.py ---
from .helpers import (
    DataPipeline,
    convert_to_numeric,
    format_date_ddmmyyyy,
    round_half_up
)

# --- Record Validation & Loading from loaders.py ---
from .loaders import (
    InvalidFormatError,
    ParseFailureError,
    RecordLoadError,
    load_records,
    load_records_file,
    parse_records_json
)

# --- Filter Engine from filters.py ---
from .filters import (
    FilterState,
    apply_filters,
    build_filter_summary,
    get_unique_roles,
    has_blank_sex
)

# --- Pure, Non-cached Logic from logic.py ---
from .logic import (
    calculate_axis_domain,
    calculate_composite_kpis,
    calculate_daily_composite_trend,
    clip_trend_to_event,
    event_marker_in_range
)


# --- Define the canonical public API for the package ---
__all__ = [
    # helpers.py
    "DataPipeline",
    "convert_to_numeric",
    "format_date_ddmmyyyy",
    "round_half_up",

    # loaders.py
    "RecordLoadError",
    "ParseFailureError",
    "InvalidFormatError",
    "load_records",
    "parse_records_json",
    "load_records_file",

    # filters.py
    "FilterState",
    "apply_filters",
    "build_filter_summary",
    "get_unique_roles",
    "has_blank_sex",

    # logic.py
    "calculate_composite_kpis",
    "calculate_daily_composite_trend",
    "clip_trend_to_event",
    "event_marker_in_range",
    "calculate_axis_domain",
]
