# farmetrics_dashboard/data_processing/metrics.py
# DASHBOARD METRICS AGGREGATION

"""
Computes the eight headline metrics of the admin dashboard.

Every metric is an independent count against the entity store. Any query
failure propagates: callers present the zeroed `DashboardMetrics` rather than
a partial set.
"""

import logging
from datetime import datetime
from typing import Optional, Union

import pandas as pd

from config import settings
from .helpers import day_window, month_window, resolve_now, safe_percentage
from .models import DashboardMetrics, IssueStatus, VisitStatus
from .store import EntityStore, Query

logger = logging.getLogger(__name__)


def calculate_dashboard_metrics(store: EntityStore, now: Optional[Union[datetime, pd.Timestamp]] = None) -> DashboardMetrics:
    """
    Args:
        store: the entity store to query.
        now: the observation moment; defaults to the current time in the
            configured timezone.

    Returns:
        A fully populated `DashboardMetrics`.
    """
    now_ts = resolve_now(now)
    day_start, day_end = day_window(now_ts)
    month_start, month_end = month_window(now_ts)
    active_since = now_ts - pd.Timedelta(days=settings.FEEDS.active_officer_window_days)

    today_submissions = store.count(
        Query('farm_visits').gte('created_at', day_start).lt('created_at', day_end)
    )
    farm_polygons_mapped = store.count(Query('farm_visits').not_null('polygon_boundaries'))
    monthly_media_files = store.count(
        Query('visit_media').gte('created_at', month_start).lt('created_at', month_end)
    )

    recent_officers = store.fetch(
        Query('farm_visits').select('field_officer_id').gte('created_at', active_since).lte('created_at', now_ts)
    )
    active_field_officers = int(recent_officers['field_officer_id'].dropna().nunique()) if not recent_officers.empty else 0

    pending_reviews = store.count(Query('issues').eq('status', IssueStatus.OPEN.value))
    reports_submitted = store.count(
        Query('farm_visits').eq('status', VisitStatus.COMPLETED.value)
        .gte('created_at', month_start).lt('created_at', month_end)
    )

    total_visits = store.count(Query('farm_visits'))
    quality_visits = store.count(Query('farm_visits').not_null('gps_latitude').not_null('gps_longitude'))
    completed_visits = store.count(Query('farm_visits').eq('status', VisitStatus.COMPLETED.value))

    metrics = DashboardMetrics(
        today_submissions=today_submissions,
        farm_polygons_mapped=farm_polygons_mapped,
        monthly_media_files=monthly_media_files,
        active_field_officers=active_field_officers,
        pending_reviews=pending_reviews,
        reports_submitted=reports_submitted,
        data_quality_score=safe_percentage(quality_visits, total_visits),
        sync_success_rate=safe_percentage(completed_visits, total_visits),
    )
    logger.debug(f"Dashboard metrics computed for {now_ts.isoformat()}: {metrics.model_dump()}")
    return metrics
