# farmetrics_dashboard/data_processing/officers.py
# OFFICER PROGRESS, OFFICER STATISTICS & LOCAL FILTERING

"""
Per-officer read models.

`calculate_officer_progress` matches each field officer's visits against
their seven visit-slot targets. `calculate_officer_stats` builds the rows of
the officer reports listing. Per-officer sub-queries are issued as one
batched query per table (`in_` on the officer ids) and grouped with pandas,
so every officer row is complete before it is returned.

Filtering works on the already-aggregated list held by the page; it never
re-queries the store. That is fine while officer counts stay in the
hundreds.
"""

import logging
from typing import Any, Dict, List, Literal, Optional, Sequence, TypeVar, Union

import pandas as pd

from config import settings
from .helpers import (clamp_percentage, convert_to_numeric, is_present,
                      optional_datetime, optional_text, safe_percentage, text_or)
from .models import OfficerProgress, OfficerRole, OfficerStats, OfficerSummary, SlotProgress
from .store import EntityStore, Query

logger = logging.getLogger(__name__)

StatusFilter = Literal['all', 'active', 'inactive']
ALL = 'all'

OfficerRow = TypeVar('OfficerRow', OfficerProgress, OfficerStats)


def slot_target_column(slot: int) -> str:
    return f"visit_{slot}_target"


def _slots() -> range:
    return range(1, settings.TARGETS.visit_slots + 1)


def resolve_slot_target(raw_target: Any) -> int:
    """The configured target for a slot, or the default when the slot is unset."""
    if not is_present(raw_target):
        return settings.TARGETS.default_visit_target
    value = convert_to_numeric(raw_target)
    return int(value) if is_present(value) else settings.TARGETS.default_visit_target


def resolve_total_target(raw_target: Any) -> int:
    """The officer's total farm target; unset or zero falls back to the default."""
    if not is_present(raw_target):
        return settings.TARGETS.default_total_farm_target
    value = convert_to_numeric(raw_target)
    return int(value) if is_present(value) and value > 0 else settings.TARGETS.default_total_farm_target


def _fetch_field_officers(store: EntityStore, *columns: str, with_supervisor: bool = False) -> pd.DataFrame:
    query = Query('profiles').select(*columns).eq('role', OfficerRole.FIELD_OFFICER.value)
    if with_supervisor:
        query.expand('supervisor', 'profiles', 'assigned_supervisor_id', ['full_name'])
    return store.fetch(query.order('created_at', descending=True))


def _fetch_targets(store: EntityStore, officer_ids: List[str]) -> Dict[str, Dict[str, Any]]:
    targets = store.fetch(Query('officer_targets').in_('field_officer_id', officer_ids))
    if targets.empty:
        return {}
    targets = targets.drop_duplicates(subset='field_officer_id', keep='first')
    return {str(row['field_officer_id']): row for row in targets.to_dict('records')}


def _fetch_visits(store: EntityStore, officer_ids: List[str], *columns: str) -> pd.DataFrame:
    return store.fetch(Query('farm_visits').select('field_officer_id', *columns).in_('field_officer_id', officer_ids))


def count_slot_visits(visits: pd.DataFrame) -> Dict[str, Dict[int, int]]:
    """
    Visits per officer per slot. Visits without a slot number (or outside the
    configured slot range) are skipped here; they still count towards totals.
    """
    if visits.empty:
        return {}
    slotted = visits.assign(slot=convert_to_numeric(visits['visit_number'])).dropna(subset=['slot'])
    slotted = slotted[slotted['slot'].isin(list(_slots()))]
    if slotted.empty:
        return {}
    counts = slotted.groupby(['field_officer_id', slotted['slot'].astype(int)]).size()
    result: Dict[str, Dict[int, int]] = {}
    for (officer_id, slot), count in counts.items():
        result.setdefault(str(officer_id), {})[int(slot)] = int(count)
    return result


def build_slot_progress(target_row: Optional[Dict[str, Any]], slot_counts: Dict[int, int]) -> List[SlotProgress]:
    slots = []
    for slot in _slots():
        target = resolve_slot_target(target_row.get(slot_target_column(slot)) if target_row else None)
        completed = slot_counts.get(slot, 0)
        slots.append(SlotProgress(
            slot=slot, completed=completed, target=target,
            percentage=clamp_percentage(safe_percentage(completed, target)),
        ))
    return slots


def calculate_officer_progress(store: EntityStore) -> List[OfficerProgress]:
    """
    Slot-by-slot progress for every field officer, newest registration first.
    """
    officers = _fetch_field_officers(
        store, 'id', 'full_name', 'uai_code', 'region', 'sub_county', 'is_active', 'created_at',
        with_supervisor=True,
    )
    if officers.empty:
        return []

    officer_ids = officers['id'].astype(str).tolist()
    targets = _fetch_targets(store, officer_ids)
    visits = _fetch_visits(store, officer_ids, 'visit_number')
    slot_counts = count_slot_visits(visits)
    totals = visits.groupby('field_officer_id').size() if not visits.empty else pd.Series(dtype=int)

    progress_rows = []
    for officer in officers.to_dict('records'):
        officer_id = str(officer['id'])
        target_row = targets.get(officer_id)
        total_target = resolve_total_target(target_row.get('total_farm_target') if target_row else None)
        total_visits = int(totals.get(officer_id, 0))

        progress_rows.append(OfficerProgress(
            id=officer_id,
            full_name=text_or(officer.get('full_name'), settings.FALLBACKS.unknown_officer),
            uai_code=optional_text(officer.get('uai_code')),
            region=optional_text(officer.get('region')),
            sub_county=optional_text(officer.get('sub_county')),
            supervisor_name=optional_text(officer.get('supervisor_full_name')),
            is_active=bool(officer.get('is_active')) if is_present(officer.get('is_active')) else False,
            total_farm_target=total_target,
            total_visits=total_visits,
            progress_percentage=clamp_percentage(safe_percentage(total_visits, total_target)),
            slots=build_slot_progress(target_row, slot_counts.get(officer_id, {})),
            created_at=optional_datetime(officer.get('created_at')),
        ))

    logger.info(f"Computed visit progress for {len(progress_rows)} field officers.")
    return progress_rows


def calculate_officer_stats(store: EntityStore) -> List[OfficerStats]:
    """Rows for the officer reports listing, newest registration first."""
    officers = _fetch_field_officers(
        store, 'id', 'full_name', 'uai_code', 'phone_number', 'region', 'sub_county', 'is_active', 'created_at',
    )
    if officers.empty:
        return []

    officer_ids = officers['id'].astype(str).tolist()
    targets = _fetch_targets(store, officer_ids)
    visits = _fetch_visits(store, officer_ids, 'created_at')
    farmers = store.fetch(Query('farmers').select('registered_by').in_('registered_by', officer_ids))

    visit_counts = visits.groupby('field_officer_id').size() if not visits.empty else pd.Series(dtype=int)
    last_visits = visits.groupby('field_officer_id')['created_at'].max() if not visits.empty else pd.Series(dtype=object)
    farmer_counts = farmers.groupby('registered_by').size() if not farmers.empty else pd.Series(dtype=int)

    rows = []
    for officer in officers.to_dict('records'):
        officer_id = str(officer['id'])
        target_row = targets.get(officer_id)
        visit_count = int(visit_counts.get(officer_id, 0))
        total_target = resolve_total_target(target_row.get('total_farm_target') if target_row else None)
        rows.append(OfficerStats(
            id=officer_id,
            full_name=text_or(officer.get('full_name'), settings.FALLBACKS.unknown_officer),
            uai_code=optional_text(officer.get('uai_code')),
            phone_number=optional_text(officer.get('phone_number')),
            region=optional_text(officer.get('region')),
            sub_county=optional_text(officer.get('sub_county')),
            is_active=bool(officer.get('is_active')) if is_present(officer.get('is_active')) else False,
            created_at=optional_datetime(officer.get('created_at')),
            visit_count=visit_count,
            farmer_count=int(farmer_counts.get(officer_id, 0)),
            progress_percentage=clamp_percentage(safe_percentage(visit_count, total_target)),
            last_visit=optional_datetime(last_visits.get(officer_id)),
        ))
    return rows


# --- Local search & filters ---

def filter_officers(
    officers: Sequence[OfficerRow],
    search: str = "",
    status: StatusFilter = ALL,
    region: str = ALL,
) -> List[OfficerRow]:
    """
    Case-insensitive substring search over name, region and UAI code, ANDed
    with the active/inactive and region equality filters.
    """
    if status not in ('all', 'active', 'inactive'):
        raise ValueError(f"Unknown status filter '{status}'.")
    needle = (search or "").strip().lower()

    def matches(officer: OfficerRow) -> bool:
        if needle:
            haystack = (officer.full_name, officer.region, officer.uai_code)
            if not any(needle in value.lower() for value in haystack if value):
                return False
        if status == 'active' and not officer.is_active:
            return False
        if status == 'inactive' and officer.is_active:
            return False
        return region == ALL or officer.region == region

    return [officer for officer in officers if matches(officer)]


def region_options(officers: Sequence[Union[OfficerProgress, OfficerStats]]) -> List[str]:
    return sorted({officer.region for officer in officers if officer.region})


def summarize_officers(officers: Sequence[OfficerStats]) -> OfficerSummary:
    return OfficerSummary(
        total=len(officers),
        active=sum(1 for officer in officers if officer.is_active),
        total_visits=sum(officer.visit_count for officer in officers),
        total_farmers=sum(officer.farmer_count for officer in officers),
    )
