# tell_dashboard/analytics/orchestrator.py
# DASHBOARD RECOMPUTATION PIPELINE & SESSION STATE

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict

from config import settings
from data_processing.filters import (FilterState, apply_filters, build_filter_summary,
                                     get_unique_roles, has_blank_sex)
from data_processing.loaders import RecordLoadError, load_records, parse_records_json
from data_processing.logic import (calculate_axis_domain, calculate_composite_kpis,
                                   calculate_daily_composite_trend, clip_trend_to_event,
                                   event_marker_in_range)
from .before_after import BeforeAfterStats, calculate_before_after_stats, calculate_before_after_table
from .participant import (build_participant_timeline, calculate_participant_before_after,
                          clip_participant_timeline, get_participant_records,
                          list_participants, summarize_participant)
from .risk_bucketing import RiskBuckets, calculate_all_risk_buckets, calculate_risk_buckets

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def normalize_event_date(value: Union[str, date, None]) -> Optional[str]:
    """Accepts a date or a YYYY-MM-DD string; empty values clear the event date."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and ISO_DATE.match(value):
        return value
    raise ValueError(f"Event date must be a YYYY-MM-DD string, got {value!r}")


class ParticipantView(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    participant_id: Optional[str] = None
    records: pd.DataFrame
    summary: Dict[str, Any]
    before_after: Optional[Dict[str, BeforeAfterStats]] = None
    timeline: pd.DataFrame
    clipped_timeline: pd.DataFrame
    show_event_marker: bool = False
    axis_domain: Optional[Tuple[pd.Timestamp, pd.Timestamp]] = None


class DashboardViews(BaseModel):
    """Every display-ready structure derived from the current inputs."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    filtered_records: pd.DataFrame
    filter_summary: str
    unique_roles: List[str]
    has_blank_sex: bool
    kpis: Dict[str, Any]
    risk_buckets: Dict[str, RiskBuckets]
    before_after: Optional[Dict[str, BeforeAfterStats]] = None
    trend: pd.DataFrame
    clipped_trend: pd.DataFrame
    show_event_marker: bool = False
    axis_domain: Optional[Tuple[pd.Timestamp, pd.Timestamp]] = None
    participants: List[Dict[str, str]]
    participant: ParticipantView


class DashboardOrchestrator:
    """
    A pipeline class that derives every dashboard view from (records, state)
    in one pass. Each step reads the inputs and writes only its own output;
    nothing is mutated.
    """
    def __init__(
        self,
        records: pd.DataFrame,
        filters: FilterState,
        event_date: Optional[str] = None,
        view_mode: str = "full",
        participant_id: Optional[str] = None,
        individual_event_date: Optional[str] = None,
        individual_view_mode: str = "full",
    ):
        self.records = records if isinstance(records, pd.DataFrame) else load_records([])
        self.filters = filters
        self.event_date = event_date
        self.view_mode = view_mode
        self.participant_id = participant_id
        self.individual_event_date = individual_event_date
        self.individual_view_mode = individual_view_mode
        self.outputs: Dict[str, Any] = {}

    def _apply_filters(self) -> 'DashboardOrchestrator':
        filtered = apply_filters(self.records, self.filters)
        self.outputs['filtered_records'] = filtered
        self.outputs['filter_summary'] = build_filter_summary(self.filters, len(filtered), len(self.records))
        self.outputs['unique_roles'] = get_unique_roles(self.records)
        self.outputs['has_blank_sex'] = has_blank_sex(self.records)
        return self

    def _summarize(self) -> 'DashboardOrchestrator':
        filtered = self.outputs['filtered_records']
        self.outputs['kpis'] = calculate_composite_kpis(filtered)
        self.outputs['risk_buckets'] = calculate_all_risk_buckets(filtered)
        self.outputs['before_after'] = calculate_before_after_table(filtered, self.event_date)
        return self

    def _build_trend(self) -> 'DashboardOrchestrator':
        trend = calculate_daily_composite_trend(self.outputs['filtered_records'])
        self.outputs['trend'] = trend
        self.outputs['clipped_trend'] = clip_trend_to_event(trend, self.event_date, self.view_mode)
        self.outputs['show_event_marker'] = event_marker_in_range(trend, self.event_date)
        self.outputs['axis_domain'] = calculate_axis_domain(trend, self.event_date, self.view_mode)
        return self

    def _build_participant(self) -> 'DashboardOrchestrator':
        self.outputs['participants'] = list_participants(self.records)
        records = get_participant_records(self.records, self.participant_id)
        timeline = build_participant_timeline(records)
        self.outputs['participant'] = ParticipantView(
            participant_id=self.participant_id,
            records=records,
            summary=summarize_participant(records),
            before_after=calculate_participant_before_after(records, self.individual_event_date),
            timeline=timeline,
            clipped_timeline=clip_participant_timeline(timeline, self.individual_event_date, self.individual_view_mode),
            show_event_marker=event_marker_in_range(timeline, self.individual_event_date),
            axis_domain=calculate_axis_domain(timeline, self.individual_event_date, self.individual_view_mode),
        )
        return self

    def run(self) -> DashboardViews:
        """Executes the full recomputation in a fluent sequence."""
        (self
            ._apply_filters()
            ._summarize()
            ._build_trend()
            ._build_participant()
        )
        logger.debug(f"Recomputed dashboard views: {len(self.outputs['filtered_records'])} of {len(self.records)} records after filters.")
        return DashboardViews(**self.outputs)


class DashboardSession:
    """
    Holds the single-session dashboard state and recomputes every derived
    view after each setter. Load failures leave the previous records, filters
    and event dates untouched and only set `load_error`.
    """
    def __init__(self):
        self.records: pd.DataFrame = load_records([])
        self.json_loaded: bool = False
        self.load_error: Optional[str] = None
        self.filters = FilterState()
        self.event_date: Optional[str] = None
        self.view_mode: str = "full"
        self.participant_id: Optional[str] = None
        self.individual_event_date: Optional[str] = None
        self.individual_view_mode: str = "full"
        self._views: Optional[DashboardViews] = None
        self.recompute()

    # --- Recomputation ---

    def recompute(self) -> DashboardViews:
        self._views = DashboardOrchestrator(
            self.records, self.filters, self.event_date, self.view_mode,
            self.participant_id, self.individual_event_date, self.individual_view_mode,
        ).run()
        return self._views

    @property
    def views(self) -> DashboardViews:
        return self._views if self._views is not None else self.recompute()

    def _reset_dependent_state(self) -> None:
        self.filters = FilterState()
        self.event_date = None
        self.view_mode = "full"
        self.participant_id = None
        self.individual_event_date = None
        self.individual_view_mode = "full"

    # --- Data Lifecycle ---

    def load_parsed(self, raw: Any) -> bool:
        """Loads already-parsed JSON. Returns True on success; on failure sets `load_error`."""
        try:
            records = load_records(raw)
        except RecordLoadError as e:
            self.load_error = e.user_message
            logger.error(f"Record load rejected, keeping previous data: {e}")
            return False
        self._accept(records)
        return True

    def load_json(self, content: Union[str, bytes]) -> bool:
        """Parses and loads raw JSON text. Returns True on success; on failure sets `load_error`."""
        try:
            records = parse_records_json(content)
        except RecordLoadError as e:
            self.load_error = e.user_message
            logger.error(f"Record load rejected, keeping previous data: {e}")
            return False
        self._accept(records)
        return True

    def _accept(self, records: pd.DataFrame) -> None:
        self.records = records
        self.json_loaded = True
        self.load_error = None
        self._reset_dependent_state()
        logger.info(f"Dashboard session loaded {len(records)} records.")
        self.recompute()

    def clear_data(self) -> None:
        self.records = load_records([])
        self.json_loaded = False
        self.load_error = None
        self._reset_dependent_state()
        logger.info("Dashboard session cleared.")
        self.recompute()

    # --- Setters ---

    def set_filters(self, **changes: Any) -> None:
        """
        Updates one or more filter fields (sex, age_min, age_max, role).

        An edited age bound that crosses the other one snaps to it; the bound
        that was not edited is kept.
        """
        current = self.filters
        if 'age_max' in changes and 'age_min' not in changes:
            changes['age_max'] = max(int(changes['age_max']), current.age_min)
        elif 'age_min' in changes and 'age_max' not in changes:
            changes['age_min'] = min(int(changes['age_min']), current.age_max)
        self.filters = FilterState(**{**current.model_dump(), **changes})
        self.recompute()

    def reset_filters(self) -> None:
        self.filters = FilterState()
        self.recompute()

    def set_event_date(self, value: Union[str, date, None]) -> None:
        self.event_date = normalize_event_date(value)
        self.view_mode = "full"
        self.recompute()

    def set_view_mode(self, view_mode: str) -> None:
        if view_mode not in settings.ANALYTICS.timeline_view_modes:
            raise ValueError(f"Unknown timeline view mode: {view_mode!r}")
        self.view_mode = view_mode
        self.recompute()

    def select_participant(self, participant_id: Optional[str]) -> None:
        self.participant_id = participant_id or None
        self.recompute()

    def set_individual_event_date(self, value: Union[str, date, None]) -> None:
        self.individual_event_date = normalize_event_date(value)
        self.individual_view_mode = "full"
        self.recompute()

    def sync_individual_event_date(self) -> None:
        """Copies the group event date onto the individual view."""
        if self.event_date and self.json_loaded:
            self.set_individual_event_date(self.event_date)

    def set_individual_view_mode(self, view_mode: str) -> None:
        if view_mode not in settings.ANALYTICS.timeline_view_modes:
            raise ValueError(f"Unknown timeline view mode: {view_mode!r}")
        self.individual_view_mode = view_mode
        self.recompute()

    # --- Read-only Queries ---

    def filtered_records(self) -> pd.DataFrame:
        return self.views.filtered_records

    def kpis(self) -> Dict[str, Any]:
        return self.views.kpis

    def risk_buckets(self, metric: str) -> RiskBuckets:
        return calculate_risk_buckets(self.views.filtered_records, metric)

    def delta_stats(self, cutoff_date: Union[str, date, None], metric: str) -> BeforeAfterStats:
        cutoff_date = normalize_event_date(cutoff_date)
        if cutoff_date is None:
            raise ValueError("A cutoff date is required for before/after statistics.")
        return calculate_before_after_stats(self.views.filtered_records, cutoff_date, metric)

    def time_series(self, view_mode: str = "full", event_date: Optional[str] = None) -> pd.DataFrame:
        return clip_trend_to_event(self.views.trend, event_date, view_mode)
