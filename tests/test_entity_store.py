# farmetrics_dashboard/tests/test_entity_store.py
# ENTITY STORE & SNAPSHOT LOADER TESTS

import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from data_processing.export import officers_to_frame
from data_processing.helpers import DataPipeline
from data_processing.officers import calculate_officer_stats
from data_processing.loaders import TABLE_CONFIG, load_entity_store, load_table_snapshot
from data_processing.store import FrameEntityStore, Query, QueryError, SqlEntityStore

from conftest import OFFICER_JANE

# Fixtures are sourced from conftest.py

# --- DataPipeline Tests ---
def test_data_pipeline_fluent_chaining():
    """Tests the fluent, chainable interface of the DataPipeline."""
    df_dirty = pd.DataFrame({
        ' Visit Number ': ['1', 'N/A', '3'],
        'Created At': ['2024-06-12T14:00:00Z', '2024-06-12T09:00:00.500Z', 'not a date'],
        'Is Active': ['true', 'False', ''],
    })
    processed_df = (DataPipeline(df_dirty)
        .clean_column_names()
        .cast_column_types({'visit_number': 'Int64', 'is_active': 'bool'})
        .convert_date_columns(['created_at'])
        .get_dataframe()
    )

    assert list(processed_df.columns) == ['visit_number', 'created_at', 'is_active']
    assert processed_df['visit_number'].tolist()[0] == 1 and pd.isna(processed_df['visit_number'].iloc[1])
    assert str(processed_df['created_at'].dt.tz) == 'UTC'
    assert processed_df['created_at'].iloc[1] == pd.Timestamp("2024-06-12 09:00:00.500", tz="UTC")
    assert pd.isna(processed_df['created_at'].iloc[2])
    assert processed_df['is_active'].tolist() == [True, False, False]


# --- Query Builder Tests ---
def test_query_builder_records_operations():
    query = (Query('farm_visits').select('id').eq('status', 'completed').not_null('gps_latitude')
             .order('created_at', descending=True).limit(5))
    assert [f.op for f in query.filters] == ['eq', 'not_null']
    assert query.order_by == ('created_at', True)
    assert query.row_limit == 5
    with pytest.raises(ValueError):
        Query('farm_visits').limit(-1)


# --- FrameEntityStore Tests ---
def test_frame_store_filters_order_limit(store):
    df = store.fetch(Query('farm_visits').select('id').eq('status', 'completed').order('created_at', descending=True).limit(2))
    assert df['id'].tolist() == ["v1", "v2"]


def test_frame_store_count_ignores_limit(store):
    assert store.count(Query('farm_visits').eq('status', 'completed').limit(1)) == 4


def test_frame_store_in_and_null_filters(store):
    assert store.count(Query('farm_visits').in_('id', ["v1", "v3", "missing"])) == 2
    assert store.count(Query('farm_visits').is_null('gps_latitude')) == 2
    assert store.count(Query('farm_visits').neq('status', 'completed')) == 4


def test_frame_store_expansion_is_left_outer(store):
    df = store.fetch(Query('farm_visits').select('id')
                     .expand('officer', 'profiles', 'field_officer_id', ['full_name', 'region'])
                     .order('created_at', descending=True))
    assert list(df.columns) == ['id', 'officer_full_name', 'officer_region']
    assert len(df) == 8
    assert df.loc[df['id'] == "v1", 'officer_full_name'].iloc[0] == "Jane Doe"
    assert pd.isna(df.loc[df['id'] == "v8", 'officer_full_name'].iloc[0])


def test_frame_store_timestamps_are_utc(store):
    df = store.fetch(Query('profiles').select('created_at'))
    assert str(df['created_at'].dt.tz) == 'UTC'


def test_frame_store_unknown_table_and_column(store):
    with pytest.raises(QueryError):
        store.fetch(Query('harvests'))
    with pytest.raises(QueryError):
        store.count(Query('farm_visits').eq('crop', 'maize'))
    with pytest.raises(QueryError):
        store.fetch(Query('farm_visits').select('crop'))


# --- SqlEntityStore Tests ---
@pytest.fixture
def sql_store() -> SqlEntityStore:
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    pd.DataFrame([
        {'id': "p1", 'full_name': "Jane Doe", 'role': "field_officer", 'region': "Central", 'created_at': "2024-01-10T00:00:00"},
        {'id': "p2", 'full_name': "John Okello", 'role': "field_officer", 'region': "Eastern", 'created_at': "2024-02-01T00:00:00"},
    ]).to_sql('profiles', engine, index=False)
    pd.DataFrame([
        {'id': "v1", 'field_officer_id': "p1", 'status': "completed", 'gps_latitude': 0.34, 'created_at': "2024-06-12T14:00:00"},
        {'id': "v2", 'field_officer_id': "p2", 'status': "pending", 'gps_latitude': None, 'created_at': "2024-06-11T10:00:00"},
        {'id': "v3", 'field_officer_id': "ghost", 'status': "completed", 'gps_latitude': 0.5, 'created_at': "2024-06-10T09:00:00"},
    ]).to_sql('farm_visits', engine, index=False)
    return SqlEntityStore(engine)


def test_sql_store_fetch_with_expansion(sql_store):
    df = sql_store.fetch(Query('farm_visits').select('id', 'created_at')
                         .expand('officer', 'profiles', 'field_officer_id', ['full_name'])
                         .order('created_at', descending=True).limit(3))
    assert df['id'].tolist() == ["v1", "v2", "v3"]
    assert df['officer_full_name'].tolist()[:2] == ["Jane Doe", "John Okello"]
    assert pd.isna(df['officer_full_name'].iloc[2])
    assert str(df['created_at'].dt.tz) == 'UTC'


def test_sql_store_count_and_filters(sql_store):
    assert sql_store.count(Query('farm_visits')) == 3
    assert sql_store.count(Query('farm_visits').eq('status', 'completed')) == 2
    assert sql_store.count(Query('farm_visits').not_null('gps_latitude')) == 2
    assert sql_store.count(Query('farm_visits').in_('field_officer_id', ["p1", "p2"])) == 2
    assert sql_store.tables() == ['farm_visits', 'profiles']


def test_sql_store_unknown_table_and_column(sql_store):
    with pytest.raises(QueryError):
        sql_store.count(Query('harvests'))
    with pytest.raises(QueryError):
        sql_store.fetch(Query('farm_visits').select('crop'))


# --- Snapshot Loader Tests ---
def test_load_table_snapshot_missing_file_returns_empty_schema(tmp_path):
    df = load_table_snapshot('farm_visits', directory=tmp_path)
    assert df.empty
    assert list(df.columns) == TABLE_CONFIG['farm_visits'].columns


def test_load_table_snapshot_unknown_table(tmp_path):
    with pytest.raises(KeyError):
        load_table_snapshot('harvests', directory=tmp_path)


def test_load_table_snapshot_parses_and_casts(tmp_path):
    (tmp_path / "farm_visits.csv").write_text(
        "id,field_officer_id,visit_number,status,gps_latitude,created_at\n"
        f"v1,{OFFICER_JANE},1,completed,0.3476,2024-06-12T14:00:00Z\n"
        f"v2,{OFFICER_JANE},,pending,,2024-06-12T09:00:00.250Z\n"
    )
    df = load_table_snapshot('farm_visits', directory=tmp_path)
    assert len(df) == 2
    assert set(TABLE_CONFIG['farm_visits'].columns) <= set(df.columns)
    assert df['visit_number'].iloc[0] == 1 and pd.isna(df['visit_number'].iloc[1])
    assert df['created_at'].iloc[1] == pd.Timestamp("2024-06-12 09:00:00.250", tz="UTC")
    assert df['polygon_boundaries'].isna().all()


def test_load_table_snapshot_keeps_numeric_looking_text(tmp_path):
    (tmp_path / "profiles.csv").write_text(
        "id,full_name,role,phone_number,uai_code,is_active\n"
        "p1,Jane Doe,field_officer,+256700000001,0042,true\n"
        "p2,John Okello,field_officer,,,false\n"
    )
    df = load_table_snapshot('profiles', directory=tmp_path)
    assert df['phone_number'].iloc[0] == "+256700000001"
    assert df['uai_code'].iloc[0] == "0042"
    assert pd.isna(df['phone_number'].iloc[1]) and pd.isna(df['uai_code'].iloc[1])


def test_officer_export_keeps_phone_prefix(tmp_path):
    (tmp_path / "profiles.csv").write_text(
        "id,full_name,role,phone_number,uai_code,is_active,created_at\n"
        "p1,Jane Doe,field_officer,+256700000001,0042,true,2024-01-10T00:00:00Z\n"
        "p2,John Okello,field_officer,,,true,2024-02-01T00:00:00Z\n"
    )
    frame = officers_to_frame(calculate_officer_stats(load_entity_store(directory=tmp_path))).set_index("Officer Name")
    assert frame.loc["Jane Doe", "Phone"] == "+256700000001"
    assert frame.loc["Jane Doe", "UAI Code"] == "0042"
    assert frame.loc["John Okello", "Phone"] == "N/A"


def test_load_table_snapshot_missing_required_columns(tmp_path):
    (tmp_path / "farm_visits.csv").write_text("id,status\nv1,completed\n")
    df = load_table_snapshot('farm_visits', directory=tmp_path)
    assert df.empty


def test_load_entity_store_from_directory(tmp_path):
    (tmp_path / "issues.csv").write_text("id,status,created_at\ni1,open,2024-06-10T00:00:00Z\n")
    store = load_entity_store(directory=tmp_path)
    assert isinstance(store, FrameEntityStore)
    assert store.tables() == sorted(TABLE_CONFIG)
    assert store.count(Query('issues').eq('status', 'open')) == 1
    assert store.count(Query('farm_visits')) == 0
