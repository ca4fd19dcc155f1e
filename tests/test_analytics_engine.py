# tell_dashboard/tests/test_analytics_engine.py
# ANALYTICS ENGINE TESTS

from datetime import date

import numpy as np
import pandas as pd
import pytest

from analytics import (BeforeAfterStats, DashboardSession, build_participant_timeline,
                       calculate_all_risk_buckets, calculate_before_after_stats,
                       calculate_before_after_table, calculate_risk_buckets,
                       clip_participant_timeline, delta_direction, format_delta,
                       get_participant_records, list_participants, summarize_participant)
from analytics.orchestrator import normalize_event_date
from data_processing import calculate_daily_composite_trend, clip_trend_to_event, load_records

# Fixtures are sourced from conftest.py

def _records(values, metric='composite_1'):
    return load_records([{metric: v} for v in values])

# --- Risk Bucketing Tests ---
def test_tercile_buckets_split_evenly():
    buckets = calculate_risk_buckets(_records([20, 30, 40]), 'composite_1')
    for key in ('normal', 'atRisk', 'highRisk'):
        assert buckets.get(key).count == 1
        assert buckets.get(key).percentage == 33.3

def test_single_value_is_all_normal():
    buckets = calculate_risk_buckets(_records([25]), 'composite_1')
    assert buckets.normal.count == 1 and buckets.normal.percentage == 100.0
    assert buckets.at_risk.count == 0 and buckets.high_risk.count == 0

def test_identical_values_are_all_normal():
    buckets = calculate_risk_buckets(_records([7, 7, 7, "x"]), 'composite_1')
    assert buckets.normal.count == 3 and buckets.normal.percentage == 100.0
    assert buckets.at_risk.count == 0 and buckets.high_risk.count == 0
    assert buckets.total == 3

@pytest.mark.parametrize("values, genuine", [
    (list(range(7)), 7),
    (list(range(1, 12)), 11),
    ([5, "7", None, 1.5, True, 9, 9, 2], 5),
    ([3.3, 3.3, 8.1, float("nan"), 12.0], 4),
])
def test_bucket_percentages_sum_to_one_hundred(values, genuine):
    buckets = calculate_risk_buckets(_records(values), 'composite_1')
    assert buckets.total == genuine
    assert buckets.normal.count + buckets.at_risk.count + buckets.high_risk.count == genuine
    total_pct = buckets.normal.percentage + buckets.at_risk.percentage + buckets.high_risk.percentage
    assert abs(total_pct - 100.0) <= 0.3

def test_cut_points_fall_into_upper_bucket():
    buckets = calculate_risk_buckets(_records([0, 3, 6, 9]), 'composite_1')
    assert (buckets.high_risk.count, buckets.at_risk.count, buckets.normal.count) == (1, 1, 2)
    assert (buckets.high_risk.percentage, buckets.at_risk.percentage, buckets.normal.percentage) == (25.0, 25.0, 50.0)

def test_bucketing_excludes_non_numeric_values():
    buckets = calculate_risk_buckets(_records(["50", True, None, 10, 20]), 'composite_1')
    assert buckets.total == 2
    assert buckets.high_risk.count == 1 and buckets.normal.count == 1

def test_bucketing_empty_population():
    buckets = calculate_risk_buckets(_records([None, "n/a"]), 'composite_1')
    assert buckets.total == 0
    assert buckets.normal.percentage == 0.0

def test_all_risk_buckets_are_independent(records_df):
    buckets = calculate_all_risk_buckets(records_df)
    assert set(buckets) == {'composite_1', 'composite_2', 'composite_3'}
    c1 = buckets['composite_1']
    assert (c1.high_risk.count, c1.at_risk.count, c1.normal.count) == (1, 2, 2)
    assert c1.total == 5
    c2 = buckets['composite_2']
    assert (c2.high_risk.count, c2.at_risk.count, c2.normal.count) == (1, 2, 2)

def test_bucket_serialization_uses_original_keys():
    dumped = calculate_risk_buckets(_records([1, 2, 3]), 'composite_1').model_dump(by_alias=True)
    assert set(dumped) == {'normal', 'atRisk', 'highRisk'}

def test_unknown_metric_is_rejected(records_df):
    with pytest.raises(ValueError):
        calculate_risk_buckets(records_df, 'composite_9')
    with pytest.raises(ValueError):
        calculate_before_after_stats(records_df, "2024-06-01", 'composite_9')

# --- Before/After Delta Tests ---
def test_cutoff_day_belongs_to_after_group():
    df = load_records([
        {"test_date": "2024-05-31", "composite_1": 10},
        {"test_date": "2024-06-01", "composite_1": 20},
    ])
    stats = calculate_before_after_stats(df, "2024-06-01", 'composite_1')
    assert (stats.n_before, stats.n_after) == (1, 1)
    assert stats.delta_abs == pytest.approx(10.0)
    assert stats.delta_pct == pytest.approx(100.0)

def test_before_after_partition_skips_undated_records(records_df):
    stats = calculate_before_after_stats(records_df, "2024-06-01", 'composite_1')
    dated = records_df['test_date'].map(lambda v: isinstance(v, str)).sum()
    assert stats.n_before + stats.n_after == dated == 5
    assert stats.avg_before == pytest.approx(30.0)
    assert stats.avg_after == pytest.approx(42.0)
    assert stats.delta_abs == pytest.approx(12.0)
    assert stats.delta_pct == pytest.approx(40.0)

def test_empty_side_leaves_deltas_undefined(records_df):
    stats = calculate_before_after_stats(records_df, "2030-01-01", 'composite_2')
    assert stats.n_after == 0
    assert stats.avg_after is None
    assert stats.delta_abs is None and stats.delta_pct is None

def test_zero_baseline_leaves_percentage_undefined():
    df = load_records([
        {"test_date": "2024-01-01", "composite_3": 0},
        {"test_date": "2024-02-01", "composite_3": 5},
    ])
    stats = calculate_before_after_stats(df, "2024-01-15", 'composite_3')
    assert stats.delta_abs == pytest.approx(5.0)
    assert stats.delta_pct is None

def test_before_after_table_requires_event_date(records_df):
    assert calculate_before_after_table(records_df, None) is None
    assert set(calculate_before_after_table(records_df, "2024-06-01")) == {'composite_1', 'composite_2', 'composite_3'}

def test_format_delta_and_direction():
    up = BeforeAfterStats(n_before=2, n_after=2, avg_before=25.0, avg_after=27.5, delta_abs=2.5, delta_pct=10.0)
    down = BeforeAfterStats(n_before=2, n_after=2, avg_before=15.0, avg_after=12.0, delta_abs=-3.0, delta_pct=-20.0)
    assert format_delta(up) == "+2.5 (+10.0%)"
    assert format_delta(down) == "-3.0 (-20.0%)"
    assert format_delta(BeforeAfterStats()) == "—"
    assert (delta_direction(up), delta_direction(down), delta_direction(BeforeAfterStats())) == ("up", "down", "flat")

# --- Participant View Tests ---
def test_participant_options_are_sorted_with_labels(records_df):
    options = list_participants(records_df)
    assert [o['id'] for o in options] == ["P001", "P002", "P003", "P004", "P005"]
    labels = {o['id']: o['label'] for o in options}
    assert labels["P001"] == "P001 (Age: 70, Sex: M, Role: Patient)"
    assert labels["P004"] == "P004 (Age: —, Sex: —, Role: Healthy Control)"

def test_participant_records_sorted_by_test_date():
    df = load_records([
        {"participant_id": "X", "test_date": "2024-03-01", "composite_1": 3},
        {"participant_id": "Y", "test_date": "2024-01-01", "composite_1": 9},
        {"participant_id": "X", "test_date": "2024-01-01", "composite_1": 1},
    ])
    records = get_participant_records(df, "X")
    assert records['composite_1'].tolist() == [1, 3]
    summary = summarize_participant(records)
    assert summary['evaluations'] == 2
    assert summary['last_evaluation_date'] == "01/03/2024"

def test_participant_timeline_keeps_gaps(records_df):
    timeline = build_participant_timeline(get_participant_records(records_df, "P002"))
    assert len(timeline) == 1
    assert timeline.iloc[0]['composite_1'] == 20.0
    assert np.isnan(timeline.iloc[0]['composite_3'])

def test_individual_clipping_excludes_event_day_unlike_group():
    df = load_records([
        {"participant_id": "X", "test_date": d, "composite_1": v}
        for d, v in [("2024-05-01", 10), ("2024-06-01", 20), ("2024-07-01", 30)]
    ])
    timeline = build_participant_timeline(get_participant_records(df, "X"))
    assert clip_participant_timeline(timeline, "2024-06-01", "before")['date'].tolist() == ["2024-05-01"]
    assert clip_participant_timeline(timeline, "2024-06-01", "after")['date'].tolist() == ["2024-07-01"]

    trend = calculate_daily_composite_trend(df)
    assert len(clip_trend_to_event(trend, "2024-06-01", "before")) == 2
    assert len(clip_trend_to_event(trend, "2024-06-01", "after")) == 2

def test_empty_participant_selection(records_df):
    records = get_participant_records(records_df, None)
    assert records.empty
    assert summarize_participant(records)['last_evaluation_date'] == "—"

# --- Session & Orchestrator Tests ---
@pytest.fixture
def session(raw_records) -> DashboardSession:
    s = DashboardSession()
    assert s.load_parsed(raw_records)
    return s

def test_new_session_is_empty():
    s = DashboardSession()
    assert not s.json_loaded
    assert s.filtered_records().empty
    assert s.views.filter_summary == "No records to display. Adjust filters or load a JSON file."
    assert s.kpis()['display']['composite_1'] == "—"

def test_session_recomputes_after_filter_change(session):
    assert len(session.filtered_records()) == 6
    session.set_filters(sex="male")
    assert len(session.filtered_records()) == 2
    assert session.kpis()['total_records'] == 2
    assert session.views.risk_buckets['composite_1'].total == 2

def test_lowering_max_below_min_keeps_min(session):
    session.set_filters(age_min=55, age_max=70)
    session.set_filters(age_max=40)
    assert (session.filters.age_min, session.filters.age_max) == (55, 55)
    assert session.filtered_records()['participant_id'].tolist() == ["P002"]

def test_raising_min_above_max_keeps_max(session):
    session.set_filters(age_min=55, age_max=70)
    session.set_filters(age_min=90)
    assert (session.filters.age_min, session.filters.age_max) == (70, 70)
    assert session.filtered_records()['participant_id'].tolist() == ["P001", "P001"]

def test_delta_stats_requires_cutoff(session):
    with pytest.raises(ValueError):
        session.delta_stats(None, 'composite_1')
    assert session.delta_stats(date(2024, 6, 1), 'composite_1').n_before == 2

def test_rejected_load_keeps_previous_state(session):
    session.set_filters(sex="male")
    assert not session.load_json("[{broken")
    assert session.load_error == "Invalid JSON file format"
    assert not session.load_json('{"participant_id": "P1"}')
    assert session.load_error == "Invalid JSON: Expected an array of objects"
    assert session.filters.sex == "male"
    assert len(session.records) == 6
    assert len(session.filtered_records()) == 2

def test_successful_load_resets_dependent_state(session, raw_records):
    session.set_filters(role="Patient")
    session.set_event_date("2024-06-01")
    session.select_participant("P001")
    assert session.load_parsed(raw_records[:2])
    assert session.filters.is_default
    assert session.event_date is None and session.participant_id is None
    assert session.load_error is None

def test_event_date_change_resets_view_mode(session):
    session.set_event_date("2024-06-01")
    session.set_view_mode("before")
    assert len(session.views.clipped_trend) == 2
    session.set_event_date(date(2024, 6, 2))
    assert session.event_date == "2024-06-02"
    assert session.view_mode == "full"
    assert session.views.show_event_marker
    assert session.views.before_after is not None

def test_unknown_view_mode_is_rejected(session):
    with pytest.raises(ValueError):
        session.set_view_mode("sideways")

def test_individual_view_follows_selection(session):
    session.select_participant("P001")
    participant = session.views.participant
    assert participant.summary['evaluations'] == 2
    assert len(participant.timeline) == 2
    assert participant.before_after is None

    session.set_event_date("2024-06-01")
    session.sync_individual_event_date()
    assert session.individual_event_date == "2024-06-01"
    session.set_individual_view_mode("after")
    participant = session.views.participant
    assert len(participant.clipped_timeline) == 1
    assert participant.before_after['composite_1'].n_before == 1

def test_participant_picker_ignores_filters(session):
    session.set_filters(sex="female")
    assert len(session.views.participants) == 5

def test_session_query_methods(session):
    assert session.risk_buckets('composite_1').total == 5
    assert session.delta_stats("2024-06-01", 'composite_1').n_before == 2
    assert len(session.time_series("after", "2024-06-01")) == 3

def test_clear_data(session):
    session.clear_data()
    assert not session.json_loaded
    assert session.filtered_records().empty
    assert session.views.participants == []

def test_normalize_event_date():
    assert normalize_event_date(date(2024, 6, 1)) == "2024-06-01"
    assert normalize_event_date("") is None
    with pytest.raises(ValueError):
        normalize_event_date("01/06/2024")

def test_views_do_not_mutate_loaded_records(session):
    before = session.records.copy()
    session.set_filters(sex="female", age_min=20, age_max=100)
    session.set_event_date("2024-06-01")
    pd.testing.assert_frame_equal(session.records, before)
