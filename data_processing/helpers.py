# farmetrics_dashboard/data_processing/helpers.py
# Shared utilities: the fluent DataPipeline used by the loaders, numeric and
# time-window helpers, and the small derivations every feed relies on.

"""
A collection of utility functions and a fluent DataPipeline class for the
common data processing tasks of the dashboard.
"""
import logging
import math
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple, Type, Union
from datetime import datetime

import numpy as np
import pandas as pd

from config import settings

logger = logging.getLogger(__name__)

# --- Standalone Utility Functions ---

NA_REGEX_PATTERN = re.compile(
    r'(?i)^\s*(nan|none|n/a|#n/a|nat|<na>|null|nil|undefined|)\s*$'
)

def convert_to_numeric(data_input: Any, default_value: Any = np.nan, target_type: Optional[Type] = None) -> Any:
    """
    Converts various inputs to a numeric pandas Series or scalar,
    handling common "Not Available" string representations.
    """
    is_series = isinstance(data_input, pd.Series)
    series = data_input if is_series else pd.Series([data_input], dtype=object)

    if pd.api.types.is_object_dtype(series.dtype):
        series = series.replace(NA_REGEX_PATTERN, np.nan, regex=True)

    numeric_series = pd.to_numeric(series, errors='coerce')
    if not pd.isna(default_value):
        numeric_series = numeric_series.fillna(default_value)

    if target_type is int and pd.api.types.is_numeric_dtype(numeric_series.dtype):
        numeric_series = numeric_series.astype(pd.Int64Dtype() if numeric_series.isnull().any() else int)
    elif target_type is float:
        numeric_series = numeric_series.astype(float)

    return numeric_series if is_series else (numeric_series.iloc[0] if not numeric_series.empty else default_value)


def is_present(value: Any) -> bool:
    """True for anything other than None/NaN/NaT and blank strings."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (dict, list, tuple)):
        return True
    try:
        return not pd.isna(value)
    except (TypeError, ValueError):
        return True


def text_or(value: Any, fallback: str) -> str:
    return str(value) if is_present(value) else fallback


def safe_percentage(numerator: float, denominator: float) -> int:
    """100 * n / d rounded half up, or 0 when the denominator is not positive."""
    if not denominator or denominator <= 0:
        return 0
    return int(math.floor(100 * numerator / denominator + 0.5))


def clamp_percentage(value: float, lower: int = 0, upper: int = 100) -> int:
    return int(min(max(value, lower), upper))


def derive_initials(full_name: Optional[str]) -> str:
    """'Jane Doe' -> 'JD'. Absent or blank names fall back to the unknown-officer initials."""
    if not is_present(full_name):
        return settings.FALLBACKS.unknown_initials
    return "".join(token[0] for token in str(full_name).split()).upper()


# --- Time Helpers ---

def resolve_now(now: Optional[Union[datetime, pd.Timestamp]] = None) -> pd.Timestamp:
    """
    Returns "now" as a timezone-aware Timestamp in the observer's timezone.
    Naive inputs are interpreted as local to that timezone.
    """
    ts = pd.Timestamp.now(tz=settings.TIMEZONE) if now is None else pd.Timestamp(now)
    if ts.tzinfo is None:
        ts = ts.tz_localize(settings.TIMEZONE)
    return ts.tz_convert(settings.TIMEZONE)


def day_window(day: pd.Timestamp) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """[start-of-day, start-of-next-day) for the local calendar day containing `day`."""
    start = day.normalize()
    return start, (start + pd.DateOffset(days=1)).normalize()


def month_window(day: pd.Timestamp) -> Tuple[pd.Timestamp, pd.Timestamp]:
    start = day.normalize().replace(day=1)
    return start, (start + pd.DateOffset(months=1)).normalize()


def format_time_ago(timestamp: Any, now: Optional[pd.Timestamp] = None) -> str:
    """Human readable distance, e.g. '5 minutes ago', '2 days ago'."""
    if not is_present(timestamp):
        return settings.FALLBACKS.not_available
    ts = pd.Timestamp(timestamp)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    seconds = (resolve_now(now) - ts).total_seconds()
    suffix = "ago" if seconds >= 0 else "from now"
    seconds = abs(seconds)

    if seconds < 60:
        return "just now" if suffix == "ago" else "in under a minute"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            amount = int(seconds // size)
            label = f"{amount} {unit}{'s' if amount != 1 else ''}"
            return f"{label} {suffix}" if suffix == "ago" else f"in {label}"
    return "just now"


class DataPipeline:
    """
    A fluent interface for applying a sequence of cleaning operations to a
    raw table snapshot.

    Usage:
        processed_df = (DataPipeline(raw_df)
                        .clean_column_names()
                        .convert_date_columns(['created_at'])
                        .cast_column_types({'visit_number': 'Int64'})
                        .get_dataframe())
    """
    def __init__(self, df: pd.DataFrame):
        if not isinstance(df, pd.DataFrame):
            raise TypeError("DataPipeline must be initialized with a pandas DataFrame.")
        self.df = df.copy()

    def get_dataframe(self) -> pd.DataFrame:
        """Returns the processed DataFrame."""
        return self.df

    def clean_column_names(self) -> 'DataPipeline':
        """
        Cleans DataFrame column names for consistency and usability.
        (Lowercase, underscore-separated, no duplicates).
        """
        if self.df.columns.empty:
            return self

        new_cols = (self.df.columns.astype(str).str.lower()
                    .str.replace(r'[^0-9a-zA-Z_]+', '_', regex=True)
                    .str.replace(r'__+', '_', regex=True).str.strip('_'))
        new_cols = [f"unnamed_col_{i}" if not name else name for i, name in enumerate(new_cols)]

        counts = Counter(new_cols)
        if max(counts.values()) > 1:
            seen_counts: Counter = Counter()
            final_cols = []
            for name in new_cols:
                if counts[name] > 1:
                    seen_counts[name] += 1
                    final_cols.append(f"{name}_{seen_counts[name]-1}")
                else:
                    final_cols.append(name)
            self.df.columns = final_cols
        else:
            self.df.columns = new_cols
        return self

    def cast_column_types(self, dtype_map: Dict[str, str]) -> 'DataPipeline':
        """Casts columns, leaving missing values missing rather than the string 'nan'."""
        for col, dtype in (dtype_map or {}).items():
            if col not in self.df.columns:
                continue
            if dtype == 'str':
                self.df[col] = self.df[col].where(self.df[col].isna(), self.df[col].astype(str))
            elif dtype == 'Int64':
                self.df[col] = convert_to_numeric(self.df[col], target_type=int)
            elif dtype == 'float':
                self.df[col] = convert_to_numeric(self.df[col], target_type=float)
            elif dtype == 'bool':
                lowered = self.df[col].astype(str).str.strip().str.lower()
                self.df[col] = lowered.isin(['true', '1', 't', 'yes'])
            else:
                self.df[col] = self.df[col].astype(dtype)
        return self

    def convert_date_columns(self, date_columns: List[str], errors: str = 'coerce') -> 'DataPipeline':
        """Converts specified columns to timezone-aware UTC datetimes, coercing errors to NaT."""
        for col in date_columns or []:
            if col in self.df.columns:
                self.df[col] = pd.to_datetime(self.df[col], errors=errors, utc=True, format="ISO8601")
        return self


def optional_text(value: Any) -> Optional[str]:
    return str(value) if is_present(value) else None


def optional_datetime(value: Any) -> Optional[datetime]:
    """Converts pandas timestamps to `datetime`, mapping NaT/None to None."""
    if not is_present(value):
        return None
    return pd.Timestamp(value).to_pydatetime()
