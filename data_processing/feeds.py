# farmetrics_dashboard/data_processing/feeds.py
# RECENT ACTIVITY, SYNC STATUS & GEOGRAPHIC FEEDS

"""
Bounded, sorted views over the most recent field submissions.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

import pandas as pd

from config import settings
from .helpers import derive_initials, is_present, optional_datetime, resolve_now, text_or
from .models import (ActivityItem, Coordinates, GeographicSubmission, OfficerRole,
                     SYNC_STATE_DISPLAY, SyncState, SyncStatus, VisitStatus)
from .store import EntityStore, Query

logger = logging.getLogger(__name__)

_OFFICER_COLUMNS = ['full_name', 'region']


def _officer_name(row: dict) -> str:
    return text_or(row.get('officer_full_name'), settings.FALLBACKS.unknown_officer)


def _officer_region(row: dict) -> str:
    return text_or(row.get('officer_region'), settings.FALLBACKS.unknown_region)


def get_recent_activity(store: EntityStore, limit: Optional[int] = None) -> List[ActivityItem]:
    """The latest visits, newest first, with officer name/initials/region resolved."""
    visits = store.fetch(
        Query('farm_visits')
        .select('id', 'created_at', 'status', 'visit_notes')
        .expand('officer', 'profiles', 'field_officer_id', _OFFICER_COLUMNS)
        .order('created_at', descending=True)
        .limit(settings.FEEDS.recent_activity_limit if limit is None else limit)
    )
    items = []
    for row in visits.to_dict('records'):
        full_name = row.get('officer_full_name')
        items.append(ActivityItem(
            id=str(row['id']),
            officer_name=_officer_name(row),
            officer_initials=derive_initials(full_name),
            region=_officer_region(row),
            submission_type="Farm Report" if is_present(row.get('visit_notes')) else "Farm Visit",
            timestamp=optional_datetime(row.get('created_at')),
            status=row.get('status') if is_present(row.get('status')) else None,
        ))
    return items


def classify_sync_state(latest_status: Optional[str], latest_created_at: Optional[pd.Timestamp], now: pd.Timestamp) -> SyncState:
    """
    Tri-state submission health from an officer's most recent visit.

    No visit or an in-progress visit is pending, a completed visit is a
    success. A most recent visit older than the staleness window is an error
    whatever its workflow status.
    """
    if latest_created_at is None or not is_present(latest_created_at):
        return SyncState.PENDING

    state = SyncState.SUCCESS
    if latest_status == VisitStatus.IN_PROGRESS.value:
        state = SyncState.PENDING
    elif latest_status == VisitStatus.COMPLETED.value:
        state = SyncState.SUCCESS

    if now - pd.Timestamp(latest_created_at) > pd.Timedelta(hours=settings.FEEDS.stale_sync_hours):
        state = SyncState.ERROR
    return state


def get_sync_statuses(store: EntityStore, now: Optional[Union[datetime, pd.Timestamp]] = None, limit: Optional[int] = None) -> List[SyncStatus]:
    """Active field officers ordered error, pending, success; capped after sorting."""
    now_ts = resolve_now(now)
    officers = store.fetch(
        Query('profiles').select('id', 'full_name')
        .eq('role', OfficerRole.FIELD_OFFICER.value).eq('is_active', True)
    )
    if officers.empty:
        return []

    officer_ids = officers['id'].astype(str).tolist()
    visits = store.fetch(
        Query('farm_visits').select('field_officer_id', 'created_at', 'status').in_('field_officer_id', officer_ids)
    )
    if visits.empty:
        latest = pd.DataFrame(columns=['created_at', 'status'])
        totals = pd.Series(dtype=int)
    else:
        ordered = visits.sort_values('created_at', ascending=False, na_position='last', kind='mergesort')
        latest = ordered.drop_duplicates(subset='field_officer_id', keep='first').set_index('field_officer_id')
        totals = visits.groupby('field_officer_id').size()

    statuses = []
    for officer in officers.to_dict('records'):
        officer_id = str(officer['id'])
        last_created, last_status = None, None
        if officer_id in latest.index:
            last_created = latest.at[officer_id, 'created_at']
            last_status = latest.at[officer_id, 'status']
        last_created = last_created if is_present(last_created) else None

        statuses.append(SyncStatus(
            officer_id=officer_id,
            officer_name=text_or(officer.get('full_name'), settings.FALLBACKS.unknown_officer),
            status=classify_sync_state(last_status, last_created, now_ts),
            last_sync=optional_datetime(last_created) or now_ts.to_pydatetime(),
            total_submissions=int(totals.get(officer_id, 0)),
        ))

    statuses.sort(key=lambda s: SYNC_STATE_DISPLAY[s.status].priority)
    return statuses[:settings.FEEDS.sync_status_limit if limit is None else limit]


def get_geographic_submissions(store: EntityStore, limit: Optional[int] = None) -> List[GeographicSubmission]:
    """The latest geolocated visits, newest first."""
    visits = store.fetch(
        Query('farm_visits')
        .select('id', 'gps_latitude', 'gps_longitude', 'created_at', 'polygon_boundaries')
        .not_null('gps_latitude').not_null('gps_longitude')
        .expand('officer', 'profiles', 'field_officer_id', _OFFICER_COLUMNS)
        .order('created_at', descending=True)
        .limit(settings.FEEDS.geographic_limit if limit is None else limit)
    )
    submissions = []
    for row in visits.to_dict('records'):
        lat, lng = row.get('gps_latitude'), row.get('gps_longitude')
        coordinates = Coordinates(lat=float(lat), lng=float(lng)) if is_present(lat) and is_present(lng) else None
        submissions.append(GeographicSubmission(
            id=str(row['id']),
            region=_officer_region(row),
            coordinates=coordinates,
            officer_name=_officer_name(row),
            submission_type="Farm Polygon" if is_present(row.get('polygon_boundaries')) else "GPS Point",
            timestamp=optional_datetime(row.get('created_at')),
        ))
    return submissions
