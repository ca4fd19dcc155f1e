# tell_dashboard/analytics/__init__.py
# PUBLIC API FOR THE TELL ANALYTICS ENGINES

"""
Initializes the analytics package, making key functions and classes
available at the top level for easier importing.

This __init__.py defines the public API for the package.
"""

# From risk_bucketing.py
from .risk_bucketing import RiskBucket, RiskBuckets, calculate_all_risk_buckets, calculate_risk_buckets

# From before_after.py
from .before_after import (BeforeAfterStats, calculate_before_after_stats,
                           calculate_before_after_table, delta_direction, format_delta)

# From participant.py
from .participant import (build_participant_timeline, calculate_participant_before_after,
                          clip_participant_timeline, get_participant_records,
                          list_participants, summarize_participant)

# From orchestrator.py
from .orchestrator import DashboardOrchestrator, DashboardSession, DashboardViews, ParticipantView

# --- Define the public API for the analytics package ---
__all__ = [
    # Risk bucketing
    "RiskBucket",
    "RiskBuckets",
    "calculate_risk_buckets",
    "calculate_all_risk_buckets",

    # Before/after deltas
    "BeforeAfterStats",
    "calculate_before_after_stats",
    "calculate_before_after_table",
    "format_delta",
    "delta_direction",

    # Individual participant view
    "list_participants",
    "get_participant_records",
    "summarize_participant",
    "build_participant_timeline",
    "clip_participant_timeline",
    "calculate_participant_before_after",

    # Session & recomputation
    "DashboardOrchestrator",
    "DashboardSession",
    "DashboardViews",
    "ParticipantView",
]
