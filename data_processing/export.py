# farmetrics_dashboard/data_processing/export.py
# OFFICER REPORT CSV EXPORT

import csv
import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence, Union

import pandas as pd

from config import settings
from .helpers import is_present, resolve_now
from .models import OfficerStats

logger = logging.getLogger(__name__)

EXPORT_COLUMNS: List[str] = [
    "Officer Name", "UAI Code", "Phone", "Region", "Sub County", "Status",
    "Farm Visits", "Farmers Registered", "Progress", "Last Visit", "Joined",
]


def _or_na(value: Any) -> str:
    return str(value) if is_present(value) else settings.FALLBACKS.not_available


def _date_or_na(value: Optional[datetime]) -> str:
    if not is_present(value):
        return settings.FALLBACKS.not_available
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(settings.TIMEZONE)
    return ts.strftime("%Y-%m-%d")


def officers_to_frame(officers: Sequence[OfficerStats]) -> pd.DataFrame:
    """Display-ready rows of the officer listing; absent fields read 'N/A'."""
    records = [{
        "Officer Name": officer.full_name,
        "UAI Code": _or_na(officer.uai_code),
        "Phone": _or_na(officer.phone_number),
        "Region": _or_na(officer.region),
        "Sub County": _or_na(officer.sub_county),
        "Status": "Active" if officer.is_active else "Inactive",
        "Farm Visits": officer.visit_count,
        "Farmers Registered": officer.farmer_count,
        "Progress": f"{officer.progress_percentage}%",
        "Last Visit": _date_or_na(officer.last_visit),
        "Joined": _date_or_na(officer.created_at),
    } for officer in officers]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


def officers_to_csv(officers: Sequence[OfficerStats]) -> str:
    """Every cell quoted so names with commas or quotes survive the round trip."""
    frame = officers_to_frame(officers)
    logger.info(f"Exporting {len(frame)} officer rows to CSV.")
    return frame.to_csv(index=False, quoting=csv.QUOTE_ALL)


def export_filename(now: Optional[Union[datetime, pd.Timestamp]] = None) -> str:
    return f"field-officers-{resolve_now(now).strftime('%Y-%m-%d')}.csv"
