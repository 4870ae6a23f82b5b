# farmetrics_dashboard/pages/dashboard_components/__init__.py
"""
Render functions for the sections of the admin dashboard page. Each takes the
`FeedResult` of its own feed and draws either the data, an empty state or an
explicit failure state.
"""

from .metric_cards import render_metric_cards
from .weekly_trends import render_weekly_trends
from .activity_feed import render_recent_activity
from .sync_overview import render_sync_overview
from .geographic_overview import geographic_points_frame, render_geographic_overview

__all__ = [
    "render_metric_cards",
    "render_weekly_trends",
    "render_recent_activity",
    "render_sync_overview",
    "geographic_points_frame",
    "render_geographic_overview",
]
