# farmetrics_dashboard/pages/dashboard_components/weekly_trends.py
# Renders the weekly data-collection trends chart.

import streamlit as st

from data_processing.cached import FeedResult
from data_processing.trends import weekly_trends_frame
from visualization.plots import plot_weekly_trends_chart
from visualization.ui_elements import render_feed_failure


def render_weekly_trends(result: FeedResult) -> None:
    st.subheader("📈 Weekly Data Collection Trends")
    if result.failed:
        render_feed_failure("weekly trends", result.error)
        return
    buckets = result.value or []
    st.plotly_chart(plot_weekly_trends_chart(weekly_trends_frame(buckets), title="Submissions per Day"), use_container_width=True)
    if buckets:
        totals = {series: sum(getattr(bucket, series) for bucket in buckets) for series in ('photos', 'videos', 'polygons', 'reports')}
        st.caption(" · ".join(f"{name.title()}: {count:,}" for name, count in totals.items()))
