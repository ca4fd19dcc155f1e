# tell_dashboard/tests/test_ui_visualization_helpers.py
# VISUALIZATION & UI TESTS

import html
from unittest.mock import MagicMock, patch

import plotly.graph_objects as go
import pytest

from analytics import RiskBuckets, calculate_before_after_table, calculate_risk_buckets
from config import settings
from data_processing import calculate_daily_composite_trend
from visualization import (build_before_after_frame, create_empty_figure, get_theme_color,
                           plot_composite_trend_chart, plot_risk_donut, render_kpi_card,
                           set_plotly_theme)

# Fixtures are sourced from conftest.py

@pytest.fixture(scope="module", autouse=True)
def apply_theme():
    """Apply the custom Plotly theme for all tests in this module."""
    set_plotly_theme()

# --- Plotting Tests ---
def test_create_empty_figure_properties():
    """Verifies that empty figures are created with the correct message and layout."""
    fig = create_empty_figure(title="Empty Test", message="No data here.")
    assert isinstance(fig, go.Figure)
    assert "Empty Test" in fig.layout.title.text
    assert fig.layout.annotations[0].text == "No data here."

def test_plot_risk_donut_structure(records_df):
    """Tests that the risk donut uses the bucket labels, counts and colours in order."""
    buckets = calculate_risk_buckets(records_df, 'composite_1')
    fig = plot_risk_donut(buckets, "Parkinson")
    assert len(fig.data) == 1 and fig.data[0].type == 'pie'
    assert fig.data[0].hole == 0.5
    assert list(fig.data[0].labels) == ["Unconcerning", "Monitor", "Check"]
    assert list(fig.data[0].values) == [2, 2, 1]
    assert list(fig.data[0].marker.colors) == ["#4CAF50", "#FFC107", "#D32F2F"]
    assert "Parkinson" in fig.layout.title.text

def test_plot_risk_donut_without_data():
    fig = plot_risk_donut(RiskBuckets(), "Alzheimer")
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "No data available."

def test_plot_composite_trend_chart_structure(records_df):
    """Tests one line per composite and the event marker shape."""
    trend = calculate_daily_composite_trend(records_df)
    fig = plot_composite_trend_chart(trend, "Daily Composite Averages", event_date="2024-06-01", show_event_marker=True)
    assert [t.type for t in fig.data] == ['scatter'] * len(settings.COMPOSITE_FIELDS)
    assert [t.name for t in fig.data] == ["Parkinson", "Alzheimer", "Overall Severity Level"]
    assert len(fig.layout.shapes) == 1
    assert "01/06/2024" in fig.layout.annotations[0].text

def test_plot_composite_trend_chart_hides_marker_when_out_of_range(records_df):
    trend = calculate_daily_composite_trend(records_df)
    fig = plot_composite_trend_chart(trend, "Trend", event_date="2024-09-01", show_event_marker=False)
    assert len(fig.layout.shapes) == 0

def test_build_before_after_frame(records_df):
    frame = build_before_after_frame(calculate_before_after_table(records_df, "2024-06-01"))
    row = frame.iloc[0]
    assert row['Composite'] == "Parkinson"
    assert row['Before'] == "30.0 (n=2)"
    assert row['After'] == "42.0 (n=3)"
    assert row['Delta'] == "+12.0 (+40.0%)"
    assert build_before_after_frame(None).empty

def test_get_theme_color():
    assert get_theme_color('risk_high') == settings.COLOR_RISK_HIGH
    assert get_theme_color('does_not_exist', fallback="#000000") == "#000000"

# --- UI Element Tests ---
@patch('visualization.ui_elements.st')
def test_render_kpi_card_html(mock_st):
    """Tests that KPI cards render with the correct HTML structure."""
    mock_st.markdown = MagicMock()
    render_kpi_card(title="Avg. Parkinson", value=41.0, sub_text="Composite 1", help_text="A test tooltip.")

    html_out, kwargs = mock_st.markdown.call_args
    html_content = html_out[0]

    assert 'class="kpi-card"' in html_content
    assert f'title="{html.escape("A test tooltip.")}"' in html_content
    assert '<div class="kpi-title">Avg. Parkinson</div>' in html_content
    assert '<p class="kpi-value">41.0</p>' in html_content
    assert '<div class="kpi-subtext">Composite 1</div>' in html_content
    assert kwargs['unsafe_allow_html'] is True

@patch('visualization.ui_elements.st')
def test_render_kpi_card_missing_value(mock_st):
    mock_st.markdown = MagicMock()
    render_kpi_card(title="Avg. Alzheimer", value=None)
    assert '<p class="kpi-value">—</p>' in mock_st.markdown.call_args[0][0]
