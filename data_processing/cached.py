# farmetrics_dashboard/data_processing/cached.py
# STREAMLIT CACHING LAYER & FEED FAILURE STATES

"""
Cached wrappers around the aggregation functions, plus `run_feed`, which turns
a failing feed into an explicit FAILED result instead of an empty list.

Exceptions raised inside a `st.cache_data` function are not cached, so a
failed feed is retried on the next rerun.
Feeds that depend on the clock take a minute-truncated "now" as part of
their cache key, so "today" and the staleness windows lag by under a minute.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Union

import pandas as pd
import streamlit as st
from pydantic import BaseModel

from config import settings
from .helpers import resolve_now
from .loaders import load_entity_store
from .metrics import calculate_dashboard_metrics
from .models import (ActivityItem, DashboardMetrics, GeographicSubmission, OfficerProgress,
                     OfficerStats, SyncStatus, WeeklyData)
from .officers import calculate_officer_progress, calculate_officer_stats
from .feeds import get_geographic_submissions, get_recent_activity, get_sync_statuses
from .store import FrameEntityStore, QueryError, SqlEntityStore
from .trends import calculate_weekly_trends

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = settings.WEB_CACHE_TTL_SECONDS

# The store itself is a cached resource; its identity is a stable cache key.
_STORE_HASH_FUNCS = {FrameEntityStore: id, SqlEntityStore: id}


class FeedState(str, Enum):
    READY = "ready"
    FAILED = "failed"


class FeedResult(BaseModel):
    name: str
    state: FeedState
    value: Any = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.state is FeedState.FAILED


def run_feed(name: str, fn: Callable[..., Any], default: Any, *args: Any, **kwargs: Any) -> FeedResult:
    """
    Runs one dashboard feed. On failure the error is logged and the result
    carries `default` with a FAILED state, so the page can tell "no data"
    apart from "could not load".
    """
    try:
        return FeedResult(name=name, state=FeedState.READY, value=fn(*args, **kwargs))
    except QueryError as e:
        logger.error(f"Feed '{name}' failed on a store query: {e}", exc_info=True)
        return FeedResult(name=name, state=FeedState.FAILED, value=default, error=str(e))
    except Exception as e:
        logger.error(f"Feed '{name}' failed unexpectedly: {e}", exc_info=True)
        return FeedResult(name=name, state=FeedState.FAILED, value=default, error=str(e))


def cache_clock(now: Optional[Union[datetime, pd.Timestamp]] = None) -> datetime:
    """The current local time truncated to the minute, used as a cache key."""
    return resolve_now(now).floor("min").to_pydatetime()


@st.cache_resource(show_spinner="Connecting to the data store...")
def get_entity_store():
    """One entity store per server process."""
    return load_entity_store()


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_dashboard_metrics(store, now: datetime) -> DashboardMetrics:
    return calculate_dashboard_metrics(store, now=now)


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_weekly_trends(store, now: datetime) -> List[WeeklyData]:
    return calculate_weekly_trends(store, now=now)


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_recent_activity(store) -> List[ActivityItem]:
    return get_recent_activity(store)


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_sync_statuses(store, now: datetime) -> List[SyncStatus]:
    return get_sync_statuses(store, now=now)


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_geographic_submissions(store) -> List[GeographicSubmission]:
    return get_geographic_submissions(store)


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_officer_progress(store) -> List[OfficerProgress]:
    """Cached wrapper for calculate_officer_progress."""
    return calculate_officer_progress(store)


@st.cache_data(ttl=CACHE_TTL_SECONDS, hash_funcs=_STORE_HASH_FUNCS)
def get_cached_officer_stats(store) -> List[OfficerStats]:
    """Cached wrapper for calculate_officer_stats."""
    return calculate_officer_stats(store)
