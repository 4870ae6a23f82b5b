# farmetrics_dashboard/pages/dashboard_components/geographic_overview.py
# Renders the latest geolocated submissions as a map and a list.

from typing import List

import pandas as pd
import streamlit as st

from data_processing.cached import FeedResult
from data_processing.helpers import format_time_ago
from data_processing.models import GeographicSubmission
from visualization.plots import plot_submission_map
from visualization.ui_elements import render_feed_failure, render_feed_row


def geographic_points_frame(submissions: List[GeographicSubmission]) -> pd.DataFrame:
    """One row per submission that has coordinates, shaped for the scatter map."""
    records = [{
        'lat': sub.coordinates.lat, 'lng': sub.coordinates.lng,
        'officer_name': sub.officer_name, 'region': sub.region, 'submission_type': sub.submission_type,
    } for sub in submissions if sub.coordinates is not None]
    return pd.DataFrame(records, columns=['lat', 'lng', 'officer_name', 'region', 'submission_type'])


def render_geographic_overview(result: FeedResult) -> None:
    st.subheader("📍 Geographic Overview")
    if result.failed:
        render_feed_failure("geographic submissions", result.error)
        return

    submissions: List[GeographicSubmission] = result.value or []
    if not submissions:
        st.info("No geolocated submissions yet.")
        return

    map_col, list_col = st.columns([0.6, 0.4])
    with map_col:
        st.plotly_chart(plot_submission_map(geographic_points_frame(submissions), title="Latest Geolocated Submissions"), use_container_width=True)
    with list_col:
        for sub in submissions:
            coords = sub.coordinates.label() if sub.coordinates else "No coordinates"
            render_feed_row(
                title=sub.region,
                subtitle=f"{sub.officer_name} · {coords}",
                badge_label=sub.submission_type,
                badge_color_key="primary",
                meta=format_time_ago(sub.timestamp),
            )
