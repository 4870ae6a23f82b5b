# farmetrics_dashboard/tests/conftest.py
# PYTEST FIXTURES

import sys
from pathlib import Path

# --- Path Setup for Module Imports ---
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from typing import Dict, List, Optional

import numpy as np
import pandas as pd
import pytest

from data_processing.loaders import TABLE_CONFIG
from data_processing.store import FrameEntityStore

# Wednesday afternoon; the trailing week runs Thu 2024-06-06 .. Wed 2024-06-12.
NOW = pd.Timestamp("2024-06-12 15:00:00", tz="UTC")

ADMIN_ID = "a0000000-0000-0000-0000-000000000001"
SUPERVISOR_ID = "s0000000-0000-0000-0000-000000000001"
OFFICER_JANE = "f0000000-0000-0000-0000-000000000001"
OFFICER_JOHN = "f0000000-0000-0000-0000-000000000002"
OFFICER_MARY = "f0000000-0000-0000-0000-000000000003"
OFFICER_PETER = "f0000000-0000-0000-0000-000000000004"
GHOST_OFFICER = "f0000000-0000-0000-0000-0000000000ff"


def ts(value: Optional[str]):
    return pd.Timestamp(value, tz="UTC") if value else None


def _frame(table: str, rows: List[Dict]) -> pd.DataFrame:
    """Rows in the table's column order; timestamp columns as UTC datetimes."""
    config = TABLE_CONFIG[table]
    df = pd.DataFrame(rows, columns=config.columns)
    for col in config.date_cols:
        df[col] = pd.to_datetime(df[col], utc=True)
    return df


def empty_tables() -> Dict[str, pd.DataFrame]:
    return {name: _frame(name, []) for name in TABLE_CONFIG}


# --- Core Data Fixtures ---

@pytest.fixture(scope="session")
def now() -> pd.Timestamp:
    return NOW


@pytest.fixture(scope="session")
def profiles_df() -> pd.DataFrame:
    return _frame('profiles', [
        {'id': ADMIN_ID, 'full_name': "Ada Admin", 'role': "admin", 'is_active': True, 'created_at': ts("2023-12-01")},
        {'id': SUPERVISOR_ID, 'full_name': "Sarah Supervisor", 'role': "supervisor", 'region': "Central",
         'is_active': True, 'created_at': ts("2023-12-15")},
        {'id': OFFICER_JANE, 'full_name': "Jane Doe", 'role': "field_officer", 'phone_number': "+256700000001",
         'region': "Central", 'sub_county': "Wakiso", 'uai_code': "UAI-001", 'is_active': True,
         'assigned_supervisor_id': SUPERVISOR_ID, 'created_at': ts("2024-01-10")},
        {'id': OFFICER_JOHN, 'full_name': "John Okello", 'role': "field_officer", 'phone_number': None,
         'region': "Eastern", 'sub_county': "Mbale", 'uai_code': None, 'is_active': True,
         'assigned_supervisor_id': None, 'created_at': ts("2024-02-01")},
        {'id': OFFICER_MARY, 'full_name': "Mary Atim", 'role': "field_officer", 'phone_number': "+256700000003",
         'region': "Central", 'sub_county': "Mukono", 'uai_code': "UAI-003", 'is_active': False,
         'assigned_supervisor_id': SUPERVISOR_ID, 'created_at': ts("2024-03-01")},
        {'id': OFFICER_PETER, 'full_name': "Peter Opio", 'role': "field_officer", 'phone_number': "+256700000004",
         'region': None, 'sub_county': None, 'uai_code': "UAI-004", 'is_active': True,
         'assigned_supervisor_id': None, 'created_at': ts("2024-04-01")},
    ])


@pytest.fixture(scope="session")
def officer_targets_df() -> pd.DataFrame:
    """Jane has a partial target row, John a zero total; Mary and Peter have none."""
    return _frame('officer_targets', [
        {'id': "t1", 'field_officer_id': OFFICER_JANE, 'total_farm_target': 10,
         'visit_1_target': 2, 'visit_2_target': np.nan, 'visit_3_target': 4, 'visit_4_target': 0,
         'visit_5_target': 5, 'visit_6_target': 5, 'visit_7_target': 5, 'created_at': ts("2024-01-10")},
        {'id': "t2", 'field_officer_id': OFFICER_JOHN, 'total_farm_target': 0, 'created_at': ts("2024-02-01")},
    ])


@pytest.fixture(scope="session")
def farmers_df() -> pd.DataFrame:
    return _frame('farmers', [
        {'id': "fa1", 'full_name': "Farmer One", 'region': "Central", 'registered_by': OFFICER_JANE, 'created_at': ts("2024-05-01")},
        {'id': "fa2", 'full_name': "Farmer Two", 'region': "Central", 'registered_by': OFFICER_JANE, 'created_at': ts("2024-05-02")},
        {'id': "fa3", 'full_name': "Farmer Three", 'region': "Eastern", 'registered_by': OFFICER_JOHN, 'created_at': ts("2024-05-03")},
        {'id': "fa4", 'full_name': "Farmer Four", 'region': "Western", 'registered_by': None, 'created_at': ts("2024-05-04")},
    ])


@pytest.fixture(scope="session")
def farm_visits_df() -> pd.DataFrame:
    polygon = '{"type": "Polygon", "coordinates": [[[32.58, 0.34], [32.59, 0.34], [32.59, 0.35], [32.58, 0.34]]]}'
    return _frame('farm_visits', [
        {'id': "v1", 'farmer_id': "fa1", 'field_officer_id': OFFICER_JANE, 'visit_number': 1, 'status': "completed",
         'gps_latitude': 0.3476, 'gps_longitude': 32.5825, 'polygon_boundaries': polygon, 'visit_notes': "Maize healthy",
         'created_at': ts("2024-06-12 14:00:00")},
        {'id': "v2", 'farmer_id': "fa2", 'field_officer_id': OFFICER_JANE, 'visit_number': 1, 'status': "completed",
         'gps_latitude': 0.3500, 'gps_longitude': 32.6000, 'created_at': ts("2024-06-12 09:00:00")},
        {'id': "v3", 'farmer_id': "fa1", 'field_officer_id': OFFICER_JANE, 'visit_number': 3, 'status': "in_progress",
         'created_at': ts("2024-06-11 10:00:00")},
        {'id': "v4", 'farmer_id': "fa3", 'field_officer_id': OFFICER_JOHN, 'visit_number': 1, 'status': "completed",
         'gps_latitude': 1.0800, 'gps_longitude': 34.1700, 'polygon_boundaries': polygon, 'visit_notes': "Coffee wilt observed",
         'created_at': ts("2024-06-09 12:00:00")},
        {'id': "v5", 'farmer_id': "fa3", 'field_officer_id': OFFICER_JOHN, 'visit_number': 2, 'status': "pending",
         'gps_latitude': 1.0810, 'gps_longitude': 34.1710, 'created_at': ts("2024-06-01 08:00:00")},
        {'id': "v6", 'farmer_id': "fa4", 'field_officer_id': OFFICER_MARY, 'visit_number': np.nan, 'status': "completed",
         'gps_latitude': 0.4000, 'gps_longitude': 32.7000, 'created_at': ts("2024-05-20 10:00:00")},
        {'id': "v7", 'farmer_id': "fa2", 'field_officer_id': OFFICER_JANE, 'visit_number': 9, 'status': "incomplete",
         'created_at': ts("2024-06-06 00:00:00")},
        {'id': "v8", 'farmer_id': "fa4", 'field_officer_id': GHOST_OFFICER, 'visit_number': 1, 'status': "archived",
         'gps_latitude': 0.5000, 'gps_longitude': 32.9000, 'polygon_boundaries': polygon,
         'created_at': ts("2024-06-10 23:59:59.999")},
    ])


@pytest.fixture(scope="session")
def visit_media_df() -> pd.DataFrame:
    return _frame('visit_media', [
        {'id': "m1", 'visit_id': "v1", 'media_type': "photo", 'created_at': ts("2024-06-12 14:05:00")},
        {'id': "m2", 'visit_id': "v2", 'media_type': "photo", 'created_at': ts("2024-06-12 09:10:00")},
        {'id': "m3", 'visit_id': "v3", 'media_type': "video", 'created_at': ts("2024-06-11 10:05:00")},
        {'id': "m4", 'visit_id': "v7", 'media_type': "photo", 'created_at': ts("2024-06-06 00:00:00")},
        {'id': "m5", 'visit_id': "v7", 'media_type': "video", 'created_at': ts("2024-06-05 23:59:59.999")},
        {'id': "m6", 'visit_id': "v6", 'media_type': "photo", 'created_at': ts("2024-05-31 23:59:59")},
    ])


@pytest.fixture(scope="session")
def issues_df() -> pd.DataFrame:
    return _frame('issues', [
        {'id': "i1", 'field_officer_id': OFFICER_JANE, 'issue_type': "equipment", 'status': "open", 'created_at': ts("2024-06-10")},
        {'id': "i2", 'field_officer_id': OFFICER_JOHN, 'issue_type': "access_denied", 'status': "open", 'created_at': ts("2024-06-11")},
        {'id': "i3", 'field_officer_id': OFFICER_JOHN, 'issue_type': "data_error", 'status': "resolved",
         'resolved_by': SUPERVISOR_ID, 'resolved_at': ts("2024-06-11"), 'created_at': ts("2024-06-02")},
        {'id': "i4", 'field_officer_id': OFFICER_MARY, 'issue_type': "equipment", 'status': "under_review", 'created_at': ts("2024-06-05")},
    ])


@pytest.fixture(scope="session")
def tables(profiles_df, officer_targets_df, farmers_df, farm_visits_df, visit_media_df, issues_df) -> Dict[str, pd.DataFrame]:
    return {
        **empty_tables(),
        'profiles': profiles_df,
        'officer_targets': officer_targets_df,
        'farmers': farmers_df,
        'farm_visits': farm_visits_df,
        'visit_media': visit_media_df,
        'issues': issues_df,
    }


@pytest.fixture(scope="session")
def store(tables) -> FrameEntityStore:
    return FrameEntityStore(tables)


@pytest.fixture
def empty_store() -> FrameEntityStore:
    return FrameEntityStore(empty_tables())
