# farmetrics_dashboard/pages/dashboard_components/activity_feed.py
# Renders the recent field activity list.

import logging
from typing import List

import streamlit as st

from data_processing.cached import FeedResult
from data_processing.helpers import format_time_ago
from data_processing.models import ActivityItem
from visualization.ui_elements import render_feed_failure, render_feed_row

logger = logging.getLogger(__name__)


def render_recent_activity(result: FeedResult) -> None:
    st.subheader("🕒 Recent Activity")
    if result.failed:
        render_feed_failure("recent activity", result.error)
        return

    items: List[ActivityItem] = result.value or []
    if not items:
        st.info("No field submissions yet.")
        return

    for item in items:
        display = item.display
        render_feed_row(
            title=f"{item.officer_initials} · {item.officer_name}",
            subtitle=f"{item.submission_type} · {item.region}",
            badge_label=display.label,
            badge_color_key=display.color_key,
            meta=format_time_ago(item.timestamp),
        )
