# tell_dashboard/visualization/plots.py
# CENTRALIZED PLOTTING FACTORY

import html
import logging
from typing import Optional, Tuple

import pandas as pd
import plotly.graph_objects as go
import plotly.io as pio

from config import settings
from analytics.risk_bucketing import RiskBuckets
from data_processing.helpers import format_date_ddmmyyyy, to_utc_timestamp

logger = logging.getLogger(__name__)

# --- Helper Functions ---
def _hex_to_rgba(hex_color: str, alpha: float) -> str:
    """Converts a hex color string to an rgba string for Plotly compatibility."""
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6: return 'rgba(0,0,0,0.1)'
    try:
        rgb = tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))
        return f'rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})'
    except ValueError:
        return 'rgba(0,0,0,0.1)'

# --- Theme Setup ---
def set_plotly_theme():
    """Sets the custom TELL theme as the default for all Plotly charts."""
    base_layout = {
        'font': {'family': "sans-serif", 'size': 12, 'color': settings.COLOR_TEXT_PRIMARY},
        'title': {'x': 0.5, 'xanchor': 'center', 'font': {'size': 16, 'color': settings.COLOR_TEXT_HEADINGS}},
        'paper_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'plot_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'margin': dict(l=50, r=30, t=60, b=50),
        'legend': dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1, font={'size': 10}),
        'xaxis': {'showgrid': False, 'zeroline': False},
        'yaxis': {'gridcolor': '#e9ecef', 'zeroline': False},
    }
    tell_template = go.layout.Template(layout=base_layout)
    tell_template.layout.colorway = settings.PLOTLY_COLORWAY
    pio.templates['tell'] = tell_template
    pio.templates.default = 'tell'
    logger.debug("Custom 'tell' Plotly theme applied.")

# --- Factory Functions for Charts ---
def create_empty_figure(title: str, message: str = "No data available.") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>",
        xaxis={"visible": False}, yaxis={"visible": False},
        annotations=[{"text": html.escape(message), "xref": "paper", "yref": "paper", "showarrow": False, "font": {"size": 14, "color": settings.COLOR_TEXT_MUTED}}]
    )
    return fig

def plot_risk_donut(buckets: RiskBuckets, title: str) -> go.Figure:
    """Donut of the three risk buckets of one composite, coloured Unconcerning / Monitor / Check."""
    if not isinstance(buckets, RiskBuckets) or buckets.total == 0:
        return create_empty_figure(title)
    try:
        labels = [b.label for b in settings.RISK_BUCKETS]
        values = [buckets.get(b.key).count for b in settings.RISK_BUCKETS]
        percentages = [buckets.get(b.key).percentage for b in settings.RISK_BUCKETS]
        fig = go.Figure(go.Pie(
            labels=labels, values=values, hole=0.5, sort=False,
            customdata=percentages,
            marker=dict(colors=[b.color for b in settings.RISK_BUCKETS], line=dict(width=2, color=settings.COLOR_BACKGROUND_CONTENT)),
            textinfo='label+value', textposition='inside',
            hovertemplate='<b>%{label}</b><br>Count: %{value}<br>Percentage: %{customdata:.1f}%<extra></extra>',
        ))
        fig.update_layout(title_text=f"<b>{html.escape(title)}</b>", showlegend=True)
        return fig
    except Exception as e:
        logger.error(f"Failed to create risk donut '{title}': {e}", exc_info=True)
        return create_empty_figure(title, "Error generating chart.")

def plot_composite_trend_chart(
    series_df: pd.DataFrame,
    title: str,
    event_date: Optional[str] = None,
    show_event_marker: bool = False,
    axis_domain: Optional[Tuple[pd.Timestamp, pd.Timestamp]] = None,
    mode: str = 'lines+markers',
) -> go.Figure:
    """
    One line per composite over time, with an optional dashed vertical
    marker at the event date. Used for both the group trend and the
    individual participant timeline.
    """
    if not isinstance(series_df, pd.DataFrame) or series_df.empty:
        return create_empty_figure(title, "No data for the selected period.")
    try:
        fig = go.Figure()
        for field in settings.COMPOSITE_FIELDS:
            name = settings.COMPOSITE_DISPLAY_NAMES.get(field, field)
            fig.add_trace(go.Scatter(
                x=series_df['timestamp'], y=series_df[field], mode=mode, name=name,
                connectgaps=False,
                line=dict(color=settings.COMPOSITE_COLORS.get(field, settings.COLOR_PRIMARY), width=2),
                hovertemplate=f'<b>%{{x|%d/%m/%Y}}</b><br>{html.escape(name)}: %{{y:,.1f}}<extra></extra>',
            ))
        fig.update_layout(title_text=f"<b>{html.escape(title)}</b>", yaxis_title="Score", xaxis_title="Date", hovermode='x unified')
        fig.update_xaxes(tickformat='%d/%m/%Y')
        if axis_domain is not None:
            fig.update_xaxes(range=list(axis_domain))

        event_ts = to_utc_timestamp(event_date) if event_date else None
        if show_event_marker and event_ts is not None:
            fig.add_shape(type='line', x0=event_ts, x1=event_ts, xref='x', y0=0, y1=1, yref='paper',
                          line=dict(color=settings.COLOR_EVENT_MARKER, width=2, dash='dash'))
            fig.add_annotation(x=event_ts, y=1, xref='x', yref='paper', showarrow=False, yshift=10,
                               text=f"Event: {format_date_ddmmyyyy(event_date)}",
                               font=dict(color=settings.COLOR_EVENT_MARKER, size=11),
                               bgcolor=_hex_to_rgba(settings.COLOR_EVENT_MARKER, 0.1))
        return fig
    except Exception as e:
        logger.error(f"Failed to create trend chart '{title}': {e}", exc_info=True)
        return create_empty_figure(title, "Error generating chart.")
