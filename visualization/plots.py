# farmetrics_dashboard/visualization/plots.py
# CENTRALIZED PLOTTING FACTORY

import html
import logging
from typing import List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import plotly.io as pio

from config import settings

logger = logging.getLogger(__name__)

TEMPLATE_NAME = 'farmetrics'


# --- Theme Setup ---
def set_plotly_theme():
    """Sets the custom Farmetrics theme as the default for all Plotly charts."""
    base_layout = {
        'font': {'family': "sans-serif", 'size': 12, 'color': settings.COLOR_TEXT_PRIMARY},
        'title': {'x': 0.5, 'xanchor': 'center', 'font': {'size': 16, 'color': settings.COLOR_TEXT_HEADINGS}},
        'paper_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'plot_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'margin': dict(l=50, r=30, t=60, b=50),
        'legend': dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1, font={'size': 10}),
        'xaxis': {'showgrid': False, 'zeroline': False},
        'yaxis': {'gridcolor': settings.COLOR_BORDER, 'zeroline': False},
    }
    farmetrics_template = go.layout.Template(layout=base_layout)
    farmetrics_template.layout.colorway = settings.PLOTLY_COLORWAY
    pio.templates[TEMPLATE_NAME] = farmetrics_template
    pio.templates.default = TEMPLATE_NAME
    logger.debug("Custom 'farmetrics' Plotly theme applied.")


# --- Factory Functions for Charts ---
def create_empty_figure(title: str, message: str = "No data available.") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>",
        xaxis={"visible": False}, yaxis={"visible": False},
        annotations=[{"text": html.escape(message), "xref": "paper", "yref": "paper", "showarrow": False, "font": {"size": 14, "color": settings.COLOR_TEXT_MUTED}}]
    )
    return fig


def plot_weekly_trends_chart(trends_df: pd.DataFrame, title: str = "Weekly Data Collection Trends") -> go.Figure:
    """
    Grouped bars, one group per day and one bar per series, in the order the
    buckets were produced (oldest day first).
    """
    if not isinstance(trends_df, pd.DataFrame) or trends_df.empty:
        return create_empty_figure(title)
    try:
        day_order: List[str] = list(dict.fromkeys(trends_df['day']))
        fig = px.bar(
            trends_df, x='day', y='count', color='series', barmode='group',
            title=f"<b>{html.escape(title)}</b>",
            color_discrete_map=settings.SERIES_COLORS,
            category_orders={'day': day_order, 'series': list(settings.SERIES_COLORS)},
            labels={'day': "Day", 'count': "Submissions", 'series': ""},
            hover_data={'bucket_date': True} if 'bucket_date' in trends_df.columns else None,
        )
        fig.for_each_trace(lambda trace: trace.update(name=trace.name.title()))
        fig.update_yaxes(tickformat='d', rangemode='tozero')
        return fig
    except Exception as e:
        logger.error(f"Failed to create weekly trends chart '{title}': {e}", exc_info=True)
        return create_empty_figure(title, "Error generating chart.")


def plot_slot_progress_chart(slots_df: pd.DataFrame, title: str) -> go.Figure:
    """Horizontal bars of completed visits per slot, annotated with the slot target."""
    if not isinstance(slots_df, pd.DataFrame) or slots_df.empty:
        return create_empty_figure(title)
    try:
        labels = [f"Visit {slot}" for slot in slots_df['slot']]
        fig = go.Figure()
        fig.add_trace(go.Bar(
            y=labels, x=slots_df['target'], orientation='h', name="Target",
            marker_color=settings.COLOR_BORDER, hovertemplate='Target: %{x}<extra></extra>',
        ))
        fig.add_trace(go.Bar(
            y=labels, x=slots_df['completed'], orientation='h', name="Completed",
            marker_color=settings.COLOR_PRIMARY,
            text=[f"{pct}%" for pct in slots_df['percentage']], textposition='outside',
            hovertemplate='Completed: %{x}<extra></extra>',
        ))
        fig.update_layout(title_text=f"<b>{html.escape(title)}</b>", barmode='overlay', yaxis={'autorange': 'reversed'})
        fig.update_xaxes(tickformat='d', rangemode='tozero')
        return fig
    except Exception as e:
        logger.error(f"Failed to create slot progress chart '{title}': {e}", exc_info=True)
        return create_empty_figure(title, "Error generating chart.")


def plot_submission_map(points_df: pd.DataFrame, title: str, zoom: Optional[int] = None) -> go.Figure:
    """Scatter map of geolocated submissions; expects lat, lng, officer_name, region and submission_type."""
    if not isinstance(points_df, pd.DataFrame) or points_df.empty:
        return create_empty_figure(title, "No geographic data.")
    try:
        fig = px.scatter_mapbox(
            points_df, lat='lat', lon='lng', color='submission_type',
            hover_name='officer_name', hover_data={'region': True, 'lat': ':.4f', 'lng': ':.4f', 'submission_type': False},
            mapbox_style=settings.MAPBOX_STYLE,
            zoom=settings.MAP_DEFAULT_ZOOM if zoom is None else zoom,
            center={"lat": settings.MAP_DEFAULT_CENTER[0], "lon": settings.MAP_DEFAULT_CENTER[1]},
            title=f"<b>{html.escape(title)}</b>",
            labels={'submission_type': "Type"},
        )
        fig.update_traces(marker={'size': 12})
        fig.update_layout(margin={"r": 0, "t": 40, "l": 0, "b": 0})
        return fig
    except Exception as e:
        logger.error(f"Failed to create submission map '{title}': {e}", exc_info=True)
        return create_empty_figure(title, "Error generating map.")
