# farmetrics_dashboard/pages/01_Dashboard.py
# ADMIN DASHBOARD - headline metrics, weekly trends and live field feeds

import logging

import streamlit as st

from config import settings
from data_processing import (DashboardMetrics, cache_clock, get_cached_dashboard_metrics, get_cached_geographic_submissions,
                             get_cached_recent_activity, get_cached_sync_statuses, get_cached_weekly_trends,
                             get_entity_store, run_feed)
from pages.dashboard_components import (render_geographic_overview, render_metric_cards,
                                        render_recent_activity, render_sync_overview, render_weekly_trends)
from visualization import load_and_inject_css, set_plotly_theme

# --- Page Setup ---
st.set_page_config(page_title=f"Dashboard - {settings.APP_NAME}", page_icon="🌾", layout="wide")
logger = logging.getLogger(__name__)
load_and_inject_css(settings.STYLE_CSS_PATH)
set_plotly_theme()

st.title("🌾 Field Data Collection Dashboard")
st.markdown(f"Monitor submissions, officer activity and data quality across **{settings.ORGANIZATION_NAME}**.")

with st.sidebar:
    st.header("Data")
    if st.button("🔄 Refresh data", use_container_width=True):
        st.cache_data.clear()
        st.rerun()
    st.caption(f"Cached views refresh every {settings.WEB_CACHE_TTL_SECONDS // 60} minutes. Timezone: {settings.TIMEZONE}")

st.divider()

try:
    store = get_entity_store()
except Exception as e:
    logger.critical(f"Could not open the entity store: {e}", exc_info=True)
    st.error("The data store is unavailable. Check FARMETRICS_DATABASE_URL or the data_sources directory.")
    st.stop()

# Each section loads independently; one failing feed never blanks the others.
now = cache_clock()
render_metric_cards(run_feed("dashboard_metrics", get_cached_dashboard_metrics, DashboardMetrics(), store, now))
st.divider()

render_weekly_trends(run_feed("weekly_trends", get_cached_weekly_trends, [], store, now))
st.divider()

activity_col, sync_col = st.columns(2)
with activity_col:
    render_recent_activity(run_feed("recent_activity", get_cached_recent_activity, [], store))
with sync_col:
    render_sync_overview(run_feed("sync_status", get_cached_sync_statuses, [], store, now))
st.divider()

render_geographic_overview(run_feed("geographic_submissions", get_cached_geographic_submissions, [], store))

st.divider()
st.caption(settings.APP_FOOTER_TEXT)
