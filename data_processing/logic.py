# tell_dashboard/data_processing/logic.py
# PURE BACKEND AGGREGATION LOGIC

"""
Houses the pure, non-cached aggregation logic for the TELL dashboard: the
composite KPI summary and the daily composite trend.

This module has no dependency on Streamlit and can be safely imported by any
backend component, including the analytics package.

Both aggregations treat a missing or non-numeric composite as 0 inside the
mean. The risk bucketing engine excludes such values instead.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from config import settings
from .helpers import convert_to_numeric, date_prefix, to_utc_timestamp

logger = logging.getLogger(__name__)

TREND_COLUMNS = ['date', 'timestamp'] + list(settings.COMPOSITE_FIELDS)


def _format_average(value: Optional[float]) -> str:
    if value is None:
        return settings.ANALYTICS.no_data_sentinel
    return f"{value:.{settings.ANALYTICS.kpi_decimals}f}"


def calculate_composite_kpis(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Calculates the headline KPIs for a record set.

    Args:
        df (pd.DataFrame): The (filtered) record frame.

    Returns:
        A dictionary with `total_records`, `averages` (field -> float, or None
        when there are no records) and `display` (field -> 1-decimal string, or
        the no-data sentinel).
    """
    total = len(df) if isinstance(df, pd.DataFrame) else 0
    averages: Dict[str, Optional[float]] = {}
    for field in settings.COMPOSITE_FIELDS:
        if total == 0:
            averages[field] = None
        else:
            averages[field] = float(convert_to_numeric(df[field], default_value=0.0).sum() / total)

    return {
        'total_records': total,
        'averages': averages,
        'display': {field: _format_average(avg) for field, avg in averages.items()},
    }


def calculate_daily_composite_trend(df: Optional[pd.DataFrame]) -> pd.DataFrame:
    """
    Groups records by calendar day (first 10 characters of `test_date`) and
    averages each composite per day.

    Records without a string `test_date` are skipped. Each day gets a UTC
    `timestamp` from calendar-date parsing and the output is sorted by it.

    Returns:
        A DataFrame with columns `date`, `timestamp`, `composite_1`,
        `composite_2`, `composite_3`; one row per distinct day.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        return pd.DataFrame(columns=TREND_COLUMNS)

    work = pd.DataFrame({'date': df['test_date'].map(date_prefix)}, index=df.index)
    for field in settings.COMPOSITE_FIELDS:
        work[field] = convert_to_numeric(df[field], default_value=0.0).astype(float)
    work = work.dropna(subset=['date'])
    if work.empty:
        return pd.DataFrame(columns=TREND_COLUMNS)

    trend = work.groupby('date', sort=False)[list(settings.COMPOSITE_FIELDS)].mean().reset_index()
    trend['timestamp'] = pd.to_datetime(trend['date'].map(to_utc_timestamp), utc=True)

    unparseable = trend['timestamp'].isna()
    if unparseable.any():
        logger.warning(f"Dropping {int(unparseable.sum())} trend day(s) with unparseable dates: {trend.loc[unparseable, 'date'].tolist()}")
        trend = trend.loc[~unparseable]

    trend = trend.sort_values('timestamp', kind='mergesort').reset_index(drop=True)
    return trend[TREND_COLUMNS]


def clip_trend_to_event(trend: pd.DataFrame, event_date: Optional[str], view_mode: str = "full") -> pd.DataFrame:
    """
    Clips the group trend to the days before or after the event date.

    Both sides include the event day itself (`<=` / `>=`). The individual
    participant timeline uses strict bounds instead; see
    `analytics.participant.clip_participant_timeline`.
    """
    if view_mode not in settings.ANALYTICS.timeline_view_modes:
        raise ValueError(f"Unknown timeline view mode: {view_mode!r}")
    if not event_date or view_mode == "full" or trend.empty:
        return trend.copy()

    event_ts = to_utc_timestamp(event_date)
    if event_ts is None:
        logger.warning(f"Ignoring unparseable event date '{event_date}' for trend clipping.")
        return trend.copy()

    if view_mode == "before":
        return trend.loc[trend['timestamp'] <= event_ts].reset_index(drop=True)
    return trend.loc[trend['timestamp'] >= event_ts].reset_index(drop=True)


def event_marker_in_range(series_df: pd.DataFrame, event_date: Optional[str]) -> bool:
    """Whether the event date falls within the (unclipped) series' time span, so a marker should be drawn."""
    if not event_date or not isinstance(series_df, pd.DataFrame) or series_df.empty:
        return False
    event_ts = to_utc_timestamp(event_date)
    if event_ts is None:
        return False
    timestamps = series_df['timestamp'].dropna()
    if timestamps.empty:
        return False
    return bool(timestamps.min() <= event_ts <= timestamps.max())


def calculate_axis_domain(
    series_df: pd.DataFrame,
    event_date: Optional[str],
    view_mode: str = "full"
) -> Optional[Tuple[pd.Timestamp, pd.Timestamp]]:
    """x-axis range for a timeline chart: the full span, or the span up to / from the event date."""
    if not isinstance(series_df, pd.DataFrame) or series_df.empty:
        return None
    timestamps = series_df['timestamp'].dropna()
    if timestamps.empty:
        return None
    min_ts, max_ts = timestamps.min(), timestamps.max()

    event_ts = to_utc_timestamp(event_date) if event_date else None
    if event_ts is None or view_mode == "full":
        return min_ts, max_ts
    if view_mode == "before":
        return min_ts, event_ts
    return event_ts, max_ts
