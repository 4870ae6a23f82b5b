# farmetrics_dashboard/pages/dashboard_components/metric_cards.py
# Renders the eight headline metric cards of the admin dashboard.

import logging
from typing import List, NamedTuple

import streamlit as st

from data_processing.cached import FeedResult
from data_processing.models import DashboardMetrics
from visualization.ui_elements import render_feed_failure, render_kpi_card

logger = logging.getLogger(__name__)


class MetricCard(NamedTuple):
    field: str
    title: str
    icon: str
    unit: str = ""
    help_text: str = ""


METRIC_CARDS: List[MetricCard] = [
    MetricCard('today_submissions', "Today's Submissions", "📝", help_text="Farm visits created since local midnight."),
    MetricCard('farm_polygons_mapped', "Farm Polygons Mapped", "🗺️", help_text="All visits with a recorded farm boundary."),
    MetricCard('monthly_media_files', "Media Files (Month)", "📷", help_text="Photos and videos uploaded this calendar month."),
    MetricCard('active_field_officers', "Active Field Officers", "👥", help_text="Officers with at least one visit in the last 7 days."),
    MetricCard('pending_reviews', "Pending Reviews", "⏳", help_text="Open issues awaiting review."),
    MetricCard('reports_submitted', "Reports Submitted", "✅", help_text="Completed visits this calendar month."),
    MetricCard('data_quality_score', "Data Quality Score", "🎯", unit="%", help_text="Share of all visits carrying GPS coordinates."),
    MetricCard('sync_success_rate', "Sync Success Rate", "🔄", unit="%", help_text="Share of all visits with status completed."),
]


def render_metric_cards(result: FeedResult, columns_per_row: int = 4) -> None:
    """Metric cards in rows; a failed feed shows the warning above zeroed cards."""
    if result.failed:
        render_feed_failure("dashboard metrics", result.error)
    metrics: DashboardMetrics = result.value if isinstance(result.value, DashboardMetrics) else DashboardMetrics()

    for row_start in range(0, len(METRIC_CARDS), columns_per_row):
        cols = st.columns(columns_per_row)
        for col, card in zip(cols, METRIC_CARDS[row_start:row_start + columns_per_row]):
            with col:
                render_kpi_card(
                    title=card.title, value=getattr(metrics, card.field), unit=card.unit,
                    icon=card.icon, help_text=card.help_text,
                )
