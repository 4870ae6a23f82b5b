# farmetrics_dashboard/pages/dashboard_components/sync_overview.py
# Renders the field officer sync status list, problems first.

from collections import Counter
from typing import List

import streamlit as st

from data_processing.cached import FeedResult
from data_processing.helpers import format_time_ago
from data_processing.models import SYNC_STATE_DISPLAY, SyncStatus
from visualization.ui_elements import render_feed_failure, render_feed_row


def render_sync_overview(result: FeedResult) -> None:
    st.subheader("🔄 Sync Status")
    if result.failed:
        render_feed_failure("sync status", result.error)
        return

    statuses: List[SyncStatus] = result.value or []
    if not statuses:
        st.info("No active field officers.")
        return

    counts = Counter(status.status for status in statuses)
    st.caption(" · ".join(f"{display.label}: {counts.get(state, 0)}" for state, display in SYNC_STATE_DISPLAY.items()))

    for status in statuses:
        display = status.display
        render_feed_row(
            title=status.officer_name,
            subtitle=f"{status.total_submissions:,} submissions",
            badge_label=display.label,
            badge_color_key=display.color_key,
            meta=f"Last sync {format_time_ago(status.last_sync)}",
        )
