# farmetrics_dashboard/tests/test_ui_visualization_helpers.py
# VISUALIZATION, UI ELEMENT & FEED STATE TESTS

import html
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pandas as pd
import plotly.graph_objects as go
import pytest

from config import settings
from data_processing.cached import FeedResult, FeedState, cache_clock, get_cached_dashboard_metrics, run_feed
from data_processing.models import DashboardMetrics
from data_processing.store import QueryError
from data_processing.trends import calculate_weekly_trends, weekly_trends_frame
from data_processing.feeds import get_geographic_submissions
from pages.dashboard_components.activity_feed import render_recent_activity
from pages.dashboard_components.geographic_overview import geographic_points_frame
from pages.dashboard_components.metric_cards import METRIC_CARDS, render_metric_cards
from visualization import (create_empty_figure, get_theme_color, plot_slot_progress_chart, plot_submission_map,
                           plot_weekly_trends_chart, render_feed_failure, render_kpi_card, set_plotly_theme)
from visualization.ui_elements import format_kpi_value, status_badge_html

# Fixtures are sourced from conftest.py

@pytest.fixture(scope="module", autouse=True)
def apply_theme():
    """Apply the custom Plotly theme for all tests in this module."""
    set_plotly_theme()


# --- Plotting Tests ---
def test_create_empty_figure_properties():
    fig = create_empty_figure(title="Empty Test", message="No data here.")
    assert isinstance(fig, go.Figure)
    assert "Empty Test" in fig.layout.title.text
    assert fig.layout.annotations[0].text == "No data here."


def test_plot_weekly_trends_chart_grouped_series(store, now):
    frame = weekly_trends_frame(calculate_weekly_trends(store, now=now))
    fig = plot_weekly_trends_chart(frame)
    assert isinstance(fig, go.Figure)
    assert fig.layout.barmode == 'group'
    assert [trace.name for trace in fig.data] == ["Photos", "Videos", "Polygons", "Reports"]
    assert all(trace.type == 'bar' for trace in fig.data)
    assert fig.data[0].marker.color == settings.SERIES_COLORS['photos']
    assert list(fig.data[0].x) == ['Thu', 'Fri', 'Sat', 'Sun', 'Mon', 'Tue', 'Wed']


def test_plot_weekly_trends_chart_empty():
    fig = plot_weekly_trends_chart(pd.DataFrame())
    assert fig.layout.annotations[0].text == "No data available."


def test_plot_slot_progress_chart_structure():
    slots_df = pd.DataFrame([{'slot': s, 'completed': s, 'target': 5, 'percentage': s * 20} for s in range(1, 8)])
    fig = plot_slot_progress_chart(slots_df, title="Visits per Slot")
    assert [trace.name for trace in fig.data] == ["Target", "Completed"]
    assert list(fig.data[1].text)[:2] == ["20%", "40%"]
    assert "Visits per Slot" in fig.layout.title.text


def test_plot_submission_map_structure(store):
    points = geographic_points_frame(get_geographic_submissions(store))
    assert len(points) == 6
    fig = plot_submission_map(points, title="Latest Submissions")
    assert isinstance(fig, go.Figure)
    assert len(fig.data) > 0 and fig.data[0].type == 'scattermapbox'


def test_plot_submission_map_empty():
    fig = plot_submission_map(pd.DataFrame(), title="Latest Submissions")
    assert fig.layout.annotations[0].text == "No geographic data."


# --- UI Element Tests ---
@patch('visualization.ui_elements.st')
def test_render_kpi_card_html(mock_st):
    """Tests that KPI cards render with the correct HTML structure and classes."""
    mock_st.markdown = MagicMock()
    render_kpi_card(title="Data Quality Score", value=75, unit="%", status_level="STATUS_SUCCESS", help_text="A <test> tooltip.")

    html_out, kwargs = mock_st.markdown.call_args
    html_content = html_out[0]

    assert 'class="kpi-card status-status-success"' in html_content
    assert f'title="{html.escape("A <test> tooltip.")}"' in html_content
    assert '<div class="kpi-title">Data Quality Score</div>' in html_content
    assert '<p class="kpi-value">75' in html_content
    assert '<span class="kpi-units">%</span>' in html_content
    assert kwargs['unsafe_allow_html'] is True


@pytest.mark.parametrize("value, expected", [
    (1234, "1,234"), (12.0, "12"), (1234.56, "1,234.6"), (None, "N/A"), (float('nan'), "N/A"), ("Synced", "Synced"),
])
def test_format_kpi_value(value, expected):
    assert format_kpi_value(value) == expected


def test_theme_colors_and_badges():
    assert get_theme_color('status_error') == settings.COLOR_STATUS_ERROR
    assert get_theme_color('no_such_color', fallback="#000000") == "#000000"
    badge = status_badge_html("Sync Error", "status_error")
    assert "Sync Error" in badge and settings.COLOR_STATUS_ERROR in badge


@patch('visualization.ui_elements.st')
def test_render_feed_failure_is_explicit(mock_st):
    render_feed_failure("sync status", "connection refused")
    assert "sync status" in mock_st.error.call_args[0][0]
    mock_st.code.assert_called_once_with("connection refused")


# --- Feed State Tests ---
def test_run_feed_ready():
    result = run_feed("metrics", lambda: DashboardMetrics(today_submissions=4), DashboardMetrics())
    assert result.state is FeedState.READY and not result.failed
    assert result.value.today_submissions == 4


def test_run_feed_failure_returns_default():
    def broken():
        raise QueryError("Unknown table 'farm_visits'.")

    result = run_feed("metrics", broken, DashboardMetrics())
    assert result.failed
    assert result.value == DashboardMetrics()
    assert "farm_visits" in result.error


def test_run_feed_catches_unexpected_errors():
    result = run_feed("activity", lambda: 1 / 0, [])
    assert result.failed and result.value == []


def test_cache_clock_truncates_to_minute():
    assert cache_clock(pd.Timestamp("2024-06-12 15:00:42.5", tz="UTC")) == datetime(2024, 6, 12, 15, 0, tzinfo=timezone.utc)


def test_cached_metrics_are_keyed_on_the_clock(store, now):
    today = get_cached_dashboard_metrics(store, cache_clock(now))
    tomorrow = get_cached_dashboard_metrics(store, cache_clock(now + pd.Timedelta(days=1)))
    assert today.today_submissions == 2
    assert tomorrow.today_submissions == 0


@patch('pages.dashboard_components.activity_feed.render_feed_failure')
@patch('pages.dashboard_components.activity_feed.st')
def test_failed_feed_renders_failure_not_empty_state(mock_st, mock_failure):
    render_recent_activity(FeedResult(name="recent_activity", state=FeedState.FAILED, value=[], error="boom"))
    mock_failure.assert_called_once_with("recent activity", "boom")
    mock_st.info.assert_not_called()


@patch('pages.dashboard_components.activity_feed.st')
def test_empty_feed_renders_empty_state(mock_st):
    render_recent_activity(FeedResult(name="recent_activity", state=FeedState.READY, value=[]))
    mock_st.info.assert_called_once()


@patch('pages.dashboard_components.metric_cards.render_kpi_card')
@patch('pages.dashboard_components.metric_cards.render_feed_failure')
@patch('pages.dashboard_components.metric_cards.st')
def test_failed_metrics_show_zeroed_cards(mock_st, mock_failure, mock_card):
    mock_st.columns.side_effect = lambda n: [MagicMock() for _ in range(n)]
    render_metric_cards(FeedResult(name="dashboard_metrics", state=FeedState.FAILED, value=DashboardMetrics(), error="down"))
    mock_failure.assert_called_once()
    assert mock_card.call_count == len(METRIC_CARDS) == 8
    assert all(call.kwargs['value'] == 0 for call in mock_card.call_args_list)
