# tell_dashboard/analytics/participant.py
# INDIVIDUAL PARTICIPANT VIEW LOGIC

"""
Per-participant selection, summary, timeline and before/after analysis.

The participant picker works over ALL loaded records, not the filtered set:
a participant stays selectable whatever the sidebar filters are.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from config import settings
from data_processing.helpers import format_date_ddmmyyyy, is_blank_value, is_real_number, to_utc_timestamp
from .before_after import BeforeAfterStats, calculate_before_after_table

logger = logging.getLogger(__name__)

TIMELINE_COLUMNS = ['date', 'timestamp'] + list(settings.COMPOSITE_FIELDS)


def _sort_key(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _label_value(value: Any) -> str:
    if is_blank_value(value):
        return settings.ANALYTICS.no_data_sentinel
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def list_participants(df: pd.DataFrame) -> List[Dict[str, str]]:
    """
    Distinct participant ids in sorted order, each with a picker label built
    from that participant's first record.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        return []
    first_records = df.loc[df['participant_id'].map(lambda v: not is_blank_value(v))].drop_duplicates('participant_id', keep='first')
    options = []
    for _, row in first_records.iterrows():
        pid = str(row['participant_id'])
        label = f"{pid} (Age: {_label_value(row['age'])}, Sex: {_label_value(row['sex'])}, Role: {_label_value(row['role'])})"
        options.append({'id': pid, 'label': label})
    return sorted(options, key=lambda o: o['id'])


def get_participant_records(df: pd.DataFrame, participant_id: Optional[str]) -> pd.DataFrame:
    """All records of one participant, ordered by `test_date` string."""
    if not participant_id or not isinstance(df, pd.DataFrame) or df.empty:
        return pd.DataFrame(columns=settings.RECORD_COLUMNS)
    records = df.loc[df['participant_id'].map(lambda v: v is not None and str(v) == participant_id).astype(bool)]
    return records.sort_values('test_date', key=lambda s: s.map(_sort_key), kind='mergesort')


def summarize_participant(records: pd.DataFrame) -> Dict[str, Any]:
    """Number of evaluations and the last evaluation date (dd/MM/yyyy)."""
    sentinel = settings.ANALYTICS.no_data_sentinel
    if records.empty:
        return {'evaluations': 0, 'evaluations_display': sentinel, 'last_evaluation_date': sentinel}
    return {
        'evaluations': len(records),
        'evaluations_display': str(len(records)),
        'last_evaluation_date': format_date_ddmmyyyy(records['test_date'].iloc[-1], fallback=sentinel),
    }


def build_participant_timeline(records: pd.DataFrame) -> pd.DataFrame:
    """
    One point per evaluation (no daily averaging). Composites that are not
    genuine numbers become NaN so the chart shows a gap rather than a zero.
    """
    if records.empty:
        return pd.DataFrame(columns=TIMELINE_COLUMNS)
    timeline = pd.DataFrame({'date': records['test_date'].to_numpy()})
    timeline['timestamp'] = pd.to_datetime(records['test_date'].map(to_utc_timestamp).to_numpy(), utc=True)
    for field in settings.COMPOSITE_FIELDS:
        timeline[field] = [float(v) if is_real_number(v) else np.nan for v in records[field]]
    return timeline[TIMELINE_COLUMNS]


def clip_participant_timeline(timeline: pd.DataFrame, event_date: Optional[str], view_mode: str = "full") -> pd.DataFrame:
    """
    Clips the participant timeline around the individual event date.

    Unlike the group trend, both sides EXCLUDE the event instant (`<` / `>`).
    """
    if view_mode not in settings.ANALYTICS.timeline_view_modes:
        raise ValueError(f"Unknown timeline view mode: {view_mode!r}")
    if not event_date or view_mode == "full" or timeline.empty:
        return timeline.copy()

    event_ts = to_utc_timestamp(event_date)
    if event_ts is None:
        logger.warning(f"Ignoring unparseable individual event date '{event_date}'.")
        return timeline.copy()

    if view_mode == "before":
        return timeline.loc[timeline['timestamp'] < event_ts].reset_index(drop=True)
    return timeline.loc[timeline['timestamp'] > event_ts].reset_index(drop=True)


def calculate_participant_before_after(records: pd.DataFrame, event_date: Optional[str]) -> Optional[Dict[str, BeforeAfterStats]]:
    """Same delta analysis as the group table, over one participant's records and the individual event date."""
    if records.empty:
        return None
    return calculate_before_after_table(records, event_date)
