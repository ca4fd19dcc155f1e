# tell_dashboard/analytics/before_after.py
# BEFORE/AFTER EVENT DELTA ANALYSIS

import logging
from typing import Dict, Optional

import pandas as pd
from pydantic import BaseModel

from config import settings
from data_processing.helpers import convert_to_numeric, date_prefix

logger = logging.getLogger(__name__)


class BeforeAfterStats(BaseModel):
    n_before: int = 0
    n_after: int = 0
    avg_before: Optional[float] = None
    avg_after: Optional[float] = None
    delta_abs: Optional[float] = None
    delta_pct: Optional[float] = None


def split_at_cutoff(df: pd.DataFrame, cutoff_date: str) -> tuple:
    """
    Partitions records on the date prefix: `test_date[:10] < cutoff` goes
    before, everything else (the cutoff day included) goes after. Records
    without a string `test_date` are dropped from both sides.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        empty = pd.DataFrame(columns=settings.RECORD_COLUMNS)
        return empty, empty.copy()
    days = df['test_date'].map(date_prefix)
    dated = days.notna()
    is_before = dated & days.map(lambda d: d is not None and d < cutoff_date).astype(bool)
    is_after = dated & ~is_before
    return df.loc[is_before], df.loc[is_after]


def _group_mean(group: pd.DataFrame, metric: str) -> Optional[float]:
    # Missing or non-numeric values count as 0, they are not excluded.
    if group.empty:
        return None
    return float(convert_to_numeric(group[metric], default_value=0.0).sum() / len(group))


def calculate_before_after_stats(df: pd.DataFrame, cutoff_date: str, metric: str) -> BeforeAfterStats:
    """
    Compares the average of one composite before and after a cutoff date.

    `delta_abs` needs both sides; `delta_pct` additionally needs a non-zero
    baseline. Undefined values are None, never NaN.
    """
    if metric not in settings.COMPOSITE_FIELDS:
        raise ValueError(f"Unknown composite metric: {metric!r}")

    before, after = split_at_cutoff(df, cutoff_date)
    avg_before, avg_after = _group_mean(before, metric), _group_mean(after, metric)

    delta_abs: Optional[float] = None
    delta_pct: Optional[float] = None
    if avg_before is not None and avg_after is not None:
        delta_abs = avg_after - avg_before
        if avg_before != 0:
            delta_pct = delta_abs / avg_before * 100

    return BeforeAfterStats(
        n_before=len(before), n_after=len(after),
        avg_before=avg_before, avg_after=avg_after,
        delta_abs=delta_abs, delta_pct=delta_pct,
    )


def calculate_before_after_table(df: pd.DataFrame, cutoff_date: Optional[str]) -> Optional[Dict[str, BeforeAfterStats]]:
    """Runs the delta analysis for every composite. Returns None while no event date is set."""
    if not cutoff_date:
        return None
    table = {metric: calculate_before_after_stats(df, cutoff_date, metric) for metric in settings.COMPOSITE_FIELDS}
    first = table[settings.COMPOSITE_FIELDS[0]]
    logger.debug(f"Before/after split at {cutoff_date}: n_before={first.n_before}, n_after={first.n_after}")
    return table


def format_delta(stats: BeforeAfterStats) -> str:
    """Signed absolute delta with the signed percentage in parentheses, e.g. '+2.5 (+10.0%)'."""
    if stats.delta_abs is None:
        return settings.ANALYTICS.no_data_sentinel
    sign = "+" if stats.delta_abs > 0 else ""
    text = f"{sign}{stats.delta_abs:.1f}"
    if stats.delta_pct is not None:
        pct_sign = "+" if stats.delta_pct > 0 else ""
        text += f" ({pct_sign}{stats.delta_pct:.1f}%)"
    return text


def delta_direction(stats: BeforeAfterStats) -> str:
    """'up', 'down' or 'flat', used to colour the delta cell."""
    if stats.delta_abs is None or stats.delta_abs == 0:
        return "flat"
    return "up" if stats.delta_abs > 0 else "down"
