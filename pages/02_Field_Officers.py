# farmetrics_dashboard/pages/02_Field_Officers.py
# FIELD OFFICER PROGRESS - visit slots against weekly targets

import logging

import pandas as pd
import streamlit as st

from config import settings
from data_processing import filter_officers, get_cached_officer_progress, get_entity_store, region_options, run_feed
from data_processing.officers import ALL
from visualization import load_and_inject_css, plot_slot_progress_chart, render_feed_failure, render_kpi_card, set_plotly_theme

# --- Page Setup ---
st.set_page_config(page_title=f"Field Officers - {settings.APP_NAME}", page_icon="👥", layout="wide")
logger = logging.getLogger(__name__)
load_and_inject_css(settings.STYLE_CSS_PATH)
set_plotly_theme()

st.title("👥 Field Officer Progress")
st.markdown("Farm visits per officer against the seven visit-slot targets.")
st.divider()

try:
    store = get_entity_store()
except Exception as e:
    logger.critical(f"Could not open the entity store: {e}", exc_info=True)
    st.error("The data store is unavailable. Check FARMETRICS_DATABASE_URL or the data_sources directory.")
    st.stop()

result = run_feed("officer_progress", get_cached_officer_progress, [], store)
if result.failed:
    render_feed_failure("officer progress", result.error)
    st.stop()

officers = result.value
if not officers:
    st.info("No field officers registered yet.")
    st.stop()

# --- Sidebar Filters ---
with st.sidebar:
    st.header("Filters")
    search = st.text_input("Search", placeholder="Name, region or UAI code")
    status = st.selectbox("Status", options=['all', 'active', 'inactive'], format_func=str.title)
    region = st.selectbox("Region", options=[ALL] + region_options(officers),
                          format_func=lambda r: "All Regions" if r == ALL else r)

visible = filter_officers(officers, search=search, status=status, region=region)

kpi_cols = st.columns(3)
with kpi_cols[0]:
    render_kpi_card("Officers Shown", len(visible), icon="👥")
with kpi_cols[1]:
    render_kpi_card("Total Visits", sum(o.total_visits for o in visible), icon="🚜")
with kpi_cols[2]:
    avg_progress = round(sum(o.progress_percentage for o in visible) / len(visible)) if visible else 0
    render_kpi_card("Average Progress", avg_progress, unit="%", icon="🎯")
st.divider()

if not visible:
    st.info("No officers match the current filters.")
    st.stop()

for officer in visible:
    header = f"{officer.full_name} · {officer.region or settings.FALLBACKS.not_available} · {officer.progress_percentage}%"
    with st.expander(header, expanded=False):
        info_cols = st.columns(4)
        info_cols[0].markdown(f"**UAI Code**  \n{officer.uai_code or settings.FALLBACKS.not_available}")
        info_cols[1].markdown(f"**Sub County**  \n{officer.sub_county or settings.FALLBACKS.not_available}")
        info_cols[2].markdown(f"**Supervisor**  \n{officer.supervisor_name or settings.FALLBACKS.not_available}")
        info_cols[3].markdown(f"**Visits**  \n{officer.total_visits} / {officer.total_farm_target}")
        st.progress(officer.progress_percentage / 100)

        slots_df = pd.DataFrame([slot.model_dump() for slot in officer.slots])
        st.plotly_chart(plot_slot_progress_chart(slots_df, title="Visits per Slot"), use_container_width=True)
