# farmetrics_dashboard/data_processing/loaders.py
# TABLE SNAPSHOT LOADING & ENTITY STORE SELECTION

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, Field

from config import settings
from .helpers import DataPipeline
from .store import EntityStore, FrameEntityStore, SqlEntityStore

logger = logging.getLogger(__name__)

# --- Pydantic Models for Type-Safe Configuration ---

class CsvConfig(BaseModel):
    """Defines the schema for loading and processing one table snapshot."""
    file_name: str
    columns: List[str]
    date_cols: List[str] = Field(default_factory=list)
    dtype_map: Dict[str, str] = Field(default_factory=dict)
    required_cols: List[str] = Field(default_factory=lambda: ['id'])
    read_options: Dict[str, Any] = Field(default_factory=lambda: {'low_memory': False})

# --- Centralized Data Source Configuration ---

_VISIT_TARGET_COLS = [f"visit_{slot}_target" for slot in range(1, 8)]

TABLE_CONFIG: Dict[str, CsvConfig] = {
    'profiles': CsvConfig(
        file_name='profiles.csv',
        columns=['id', 'full_name', 'role', 'phone_number', 'region', 'sub_county', 'uai_code',
                 'is_active', 'assigned_supervisor_id', 'created_at', 'updated_at'],
        date_cols=['created_at', 'updated_at'],
        dtype_map={'id': 'str', 'assigned_supervisor_id': 'str', 'uai_code': 'str', 'phone_number': 'str', 'is_active': 'bool'},
        required_cols=['id', 'full_name', 'role'],
    ),
    'farmers': CsvConfig(
        file_name='farmers.csv',
        columns=['id', 'full_name', 'gender', 'id_type', 'id_number', 'phone_number', 'region',
                 'sub_county', 'registered_by', 'created_at', 'updated_at'],
        date_cols=['created_at', 'updated_at'],
        dtype_map={'id': 'str', 'registered_by': 'str', 'phone_number': 'str', 'id_number': 'str'},
        required_cols=['id', 'registered_by'],
    ),
    'farm_visits': CsvConfig(
        file_name='farm_visits.csv',
        columns=['id', 'farmer_id', 'field_officer_id', 'visit_number', 'status', 'gps_latitude',
                 'gps_longitude', 'polygon_boundaries', 'visit_notes', 'visit_date', 'created_at'],
        date_cols=['visit_date', 'created_at'],
        dtype_map={'id': 'str', 'farmer_id': 'str', 'field_officer_id': 'str', 'visit_number': 'Int64',
                   'gps_latitude': 'float', 'gps_longitude': 'float'},
        required_cols=['id', 'field_officer_id', 'created_at'],
    ),
    'visit_media': CsvConfig(
        file_name='visit_media.csv',
        columns=['id', 'visit_id', 'media_type', 'media_url', 'gps_latitude', 'gps_longitude', 'exif_data', 'created_at'],
        date_cols=['created_at'],
        dtype_map={'id': 'str', 'visit_id': 'str', 'gps_latitude': 'float', 'gps_longitude': 'float'},
        required_cols=['id', 'media_type', 'created_at'],
    ),
    'issues': CsvConfig(
        file_name='issues.csv',
        columns=['id', 'field_officer_id', 'issue_type', 'description', 'status', 'resolved_by', 'resolved_at', 'created_at'],
        date_cols=['resolved_at', 'created_at'],
        dtype_map={'id': 'str', 'field_officer_id': 'str', 'resolved_by': 'str'},
        required_cols=['id', 'status'],
    ),
    'transfer_requests': CsvConfig(
        file_name='transfer_requests.csv',
        columns=['id', 'field_officer_id', 'preferred_region', 'reason', 'status', 'approved_by', 'approved_at', 'created_at'],
        date_cols=['approved_at', 'created_at'],
        dtype_map={'id': 'str', 'field_officer_id': 'str', 'approved_by': 'str'},
        required_cols=['id', 'status'],
    ),
    'officer_targets': CsvConfig(
        file_name='officer_targets.csv',
        columns=['id', 'field_officer_id', 'total_farm_target', *_VISIT_TARGET_COLS, 'created_at'],
        date_cols=['created_at'],
        dtype_map={'id': 'str', 'field_officer_id': 'str', 'total_farm_target': 'Int64',
                   **{col: 'Int64' for col in _VISIT_TARGET_COLS}},
        required_cols=['id', 'field_officer_id'],
    ),
}

# --- Main Loading Functions ---

def _empty_table(config: CsvConfig) -> pd.DataFrame:
    return DataPipeline(pd.DataFrame(columns=config.columns)).convert_date_columns(config.date_cols).get_dataframe()


def load_table_snapshot(table_name: str, directory: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """
    Loads one table snapshot CSV. A missing or malformed file yields an empty
    table with the expected columns so that queries against it still resolve.
    """
    config = TABLE_CONFIG.get(table_name)
    if config is None:
        raise KeyError(f"No snapshot configuration for table '{table_name}'.")

    path = Path(directory or settings.DATA_SOURCES_DIR) / config.file_name
    if not path.is_file():
        logger.error(f"({table_name}) Snapshot file not found at: {path}")
        return _empty_table(config)

    # Text columns are read as text so phone numbers and codes keep "+" and leading zeros.
    text_dtypes = {col: str for col, dtype in config.dtype_map.items() if dtype == 'str'}
    try:
        df = pd.read_csv(path, dtype=text_dtypes, **config.read_options)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.critical(f"({table_name}) Could not parse snapshot {path}: {e}", exc_info=True)
        return _empty_table(config)

    processed_df = (DataPipeline(df)
        .clean_column_names()
        .cast_column_types(config.dtype_map)
        .convert_date_columns(config.date_cols)
        .get_dataframe()
    )

    missing_cols = set(config.required_cols) - set(processed_df.columns)
    if missing_cols:
        logger.critical(f"({table_name}) Schema validation failed! Missing required columns: {missing_cols}")
        return _empty_table(config)

    for col in config.columns:
        if col not in processed_df.columns:
            processed_df[col] = pd.NA

    logger.info(f"({table_name}) Successfully loaded {len(processed_df)} records.")
    return processed_df


def load_entity_store(directory: Optional[Union[str, Path]] = None) -> EntityStore:
    """
    Returns the store the dashboard should query: the managed backend when a
    database URL is configured, otherwise the CSV snapshots.
    """
    if settings.DATABASE_URL and directory is None:
        logger.info("Using the SQL entity store.")
        return SqlEntityStore.from_url(settings.DATABASE_URL, schema=settings.DATABASE_SCHEMA)

    logger.info(f"Using CSV snapshots from {directory or settings.DATA_SOURCES_DIR}.")
    return FrameEntityStore({name: load_table_snapshot(name, directory) for name in TABLE_CONFIG})
