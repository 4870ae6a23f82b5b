# farmetrics_dashboard/pages/03_Officer_Reports.py
# OFFICER REPORTS - searchable listing with CSV export

import logging

import streamlit as st

from config import settings
from data_processing import (export_filename, filter_officers, get_cached_officer_stats, get_entity_store,
                             officers_to_csv, officers_to_frame, region_options, run_feed, summarize_officers)
from data_processing.officers import ALL
from visualization import load_and_inject_css, render_feed_failure, render_kpi_card

# --- Page Setup ---
st.set_page_config(page_title=f"Officer Reports - {settings.APP_NAME}", page_icon="📋", layout="wide")
logger = logging.getLogger(__name__)
load_and_inject_css(settings.STYLE_CSS_PATH)

st.title("📋 Field Officer Reports")
st.markdown("Visits, registered farmers and progress per field officer.")
st.divider()

try:
    store = get_entity_store()
except Exception as e:
    logger.critical(f"Could not open the entity store: {e}", exc_info=True)
    st.error("The data store is unavailable. Check FARMETRICS_DATABASE_URL or the data_sources directory.")
    st.stop()

result = run_feed("officer_stats", get_cached_officer_stats, [], store)
if result.failed:
    render_feed_failure("officer reports", result.error)
    st.stop()

officers = result.value

# --- Summary Cards (all officers, before filtering) ---
summary = summarize_officers(officers)
card_cols = st.columns(4)
with card_cols[0]:
    render_kpi_card("Total Officers", summary.total, icon="👥")
with card_cols[1]:
    render_kpi_card("Active Officers", summary.active, icon="✅")
with card_cols[2]:
    render_kpi_card("Total Visits", summary.total_visits, icon="🚜")
with card_cols[3]:
    render_kpi_card("Farmers Registered", summary.total_farmers, icon="🧑‍🌾")
st.divider()

# --- Filters ---
filter_cols = st.columns([0.5, 0.25, 0.25])
search = filter_cols[0].text_input("Search officers", placeholder="Name, region or UAI code")
status = filter_cols[1].selectbox("Status", options=['all', 'active', 'inactive'], format_func=str.title)
region = filter_cols[2].selectbox("Region", options=[ALL] + region_options(officers),
                                  format_func=lambda r: "All Regions" if r == ALL else r)

visible = filter_officers(officers, search=search, status=status, region=region)
logger.debug(f"Officer reports: {len(visible)} of {len(officers)} officers after filtering.")

if not visible:
    st.info("No officers match the current filters." if officers else "No field officers registered yet.")
else:
    st.dataframe(officers_to_frame(visible), use_container_width=True, hide_index=True)

st.download_button(
    label="⬇️ Export CSV",
    data=officers_to_csv(visible),
    file_name=export_filename(),
    mime="text/csv",
    disabled=not visible,
)
