# farmetrics_dashboard/data_processing/__init__.py
# EXPLICIT PACKAGE API

"""
Initializes the data_processing package, defining its public API.

Pages import from here; the aggregation functions take an `EntityStore`
and return the typed view models from `models.py`.
"""

# --- Entity store & loading ---
from .store import EntityStore, FrameEntityStore, Query, QueryError, SqlEntityStore
from .loaders import load_entity_store, load_table_snapshot

# --- Utilities from helpers.py ---
from .helpers import (
    DataPipeline,
    convert_to_numeric,
    derive_initials,
    format_time_ago,
    safe_percentage,
)

# --- View models ---
from .models import (
    ActivityItem,
    DashboardMetrics,
    GeographicSubmission,
    OfficerProgress,
    OfficerStats,
    OfficerSummary,
    SlotProgress,
    SyncState,
    SyncStatus,
    WeeklyData,
)

# --- Pure aggregation logic ---
from .metrics import calculate_dashboard_metrics
from .trends import calculate_weekly_trends, weekly_trends_frame
from .feeds import classify_sync_state, get_geographic_submissions, get_recent_activity, get_sync_statuses
from .officers import (
    calculate_officer_progress,
    calculate_officer_stats,
    filter_officers,
    region_options,
    summarize_officers,
)
from .export import export_filename, officers_to_csv, officers_to_frame

# --- Cached wrappers & feed states (for UI) ---
from .cached import (
    FeedResult,
    FeedState,
    get_cached_dashboard_metrics,
    get_cached_geographic_submissions,
    get_cached_officer_progress,
    get_cached_officer_stats,
    get_cached_recent_activity,
    get_cached_sync_statuses,
    get_cached_weekly_trends,
    get_entity_store,
    run_feed,
    cache_clock,
)


__all__ = [
    # store.py / loaders.py
    "EntityStore", "FrameEntityStore", "SqlEntityStore", "Query", "QueryError",
    "load_entity_store", "load_table_snapshot",

    # helpers.py
    "DataPipeline", "convert_to_numeric", "derive_initials", "format_time_ago", "safe_percentage",

    # models.py
    "ActivityItem", "DashboardMetrics", "GeographicSubmission", "OfficerProgress", "OfficerStats",
    "OfficerSummary", "SlotProgress", "SyncState", "SyncStatus", "WeeklyData",

    # aggregation (backend)
    "calculate_dashboard_metrics",
    "calculate_weekly_trends", "weekly_trends_frame",
    "classify_sync_state", "get_geographic_submissions", "get_recent_activity", "get_sync_statuses",
    "calculate_officer_progress", "calculate_officer_stats", "filter_officers", "region_options",
    "summarize_officers",
    "export_filename", "officers_to_csv", "officers_to_frame",

    # cached.py (for UI)
    "FeedResult", "FeedState", "run_feed", "cache_clock", "get_entity_store",
    "get_cached_dashboard_metrics", "get_cached_weekly_trends", "get_cached_recent_activity",
    "get_cached_sync_statuses", "get_cached_geographic_submissions",
    "get_cached_officer_progress", "get_cached_officer_stats",
]
