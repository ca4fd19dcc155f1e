# tell_dashboard/analytics/risk_bucketing.py
# POPULATION-RELATIVE TERCILE RISK BUCKETING

import logging
from typing import Dict

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from config import settings
from data_processing.helpers import is_real_number, round_half_up

logger = logging.getLogger(__name__)


class RiskBucket(BaseModel):
    count: int = 0
    percentage: float = 0.0


class RiskBuckets(BaseModel):
    """Counts and percentages for one composite. Serializes with the keys normal / atRisk / highRisk."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    normal: RiskBucket = Field(default_factory=RiskBucket)
    at_risk: RiskBucket = Field(default_factory=RiskBucket, alias='atRisk')
    high_risk: RiskBucket = Field(default_factory=RiskBucket, alias='highRisk')

    @property
    def total(self) -> int:
        return self.normal.count + self.at_risk.count + self.high_risk.count

    def get(self, key: str) -> RiskBucket:
        """Looks a bucket up by its serialized key ('normal', 'atRisk', 'highRisk')."""
        return {'normal': self.normal, 'atRisk': self.at_risk, 'highRisk': self.high_risk}[key]


class TercileRiskBucketer:
    """
    Splits the observed min-max range of a composite into three equal-width
    bands and classifies every valid value. Thresholds are recomputed for
    every population, so the same score can land in different buckets for
    different filter selections.

    A LOW composite means HIGHER risk: the lowest band is `highRisk` and the
    highest band is `normal`.
    """
    def __init__(self, metric: str):
        if metric not in settings.COMPOSITE_FIELDS:
            raise ValueError(f"Unknown composite metric: {metric!r}")
        self.metric = metric
        self.decimals = settings.ANALYTICS.percentage_decimals

    def _prepare_values(self, df: pd.DataFrame) -> pd.Series:
        """Keeps genuine numbers only. Missing, textual or boolean values are excluded, not zeroed."""
        if not isinstance(df, pd.DataFrame) or df.empty or self.metric not in df.columns:
            return pd.Series(dtype=float)
        raw = df[self.metric]
        return raw[raw.map(is_real_number).astype(bool)].astype(float)

    def _pct(self, count: int, total: int) -> float:
        return round_half_up(count / total * 100, self.decimals)

    def bucket(self, df: pd.DataFrame) -> RiskBuckets:
        values = self._prepare_values(df)
        total = len(values)
        if total == 0:
            return RiskBuckets()

        min_score, max_score = values.min(), values.max()
        if min_score == max_score:
            logger.debug(f"({self.metric}) No variance across {total} values; all classified normal.")
            return RiskBuckets(normal=RiskBucket(count=total, percentage=100.0))

        score_range = max_score - min_score
        low_cut = min_score + score_range / 3
        high_cut = min_score + (2 * score_range) / 3

        high_risk = int((values < low_cut).sum())
        at_risk = int(((values >= low_cut) & (values < high_cut)).sum())
        normal = int((values >= high_cut).sum())

        logger.debug(f"({self.metric}) cuts={low_cut:.3f}/{high_cut:.3f} -> normal={normal} atRisk={at_risk} highRisk={high_risk}")
        return RiskBuckets(
            normal=RiskBucket(count=normal, percentage=self._pct(normal, total)),
            at_risk=RiskBucket(count=at_risk, percentage=self._pct(at_risk, total)),
            high_risk=RiskBucket(count=high_risk, percentage=self._pct(high_risk, total)),
        )


def calculate_risk_buckets(df: pd.DataFrame, metric: str) -> RiskBuckets:
    """Public factory function to bucket a single composite metric."""
    return TercileRiskBucketer(metric).bucket(df)


def calculate_all_risk_buckets(df: pd.DataFrame) -> Dict[str, RiskBuckets]:
    """Buckets each composite independently over the same population."""
    return {metric: calculate_risk_buckets(df, metric) for metric in settings.COMPOSITE_FIELDS}
