# farmetrics_dashboard/data_processing/trends.py
# WEEKLY DATA-COLLECTION TRENDS

import logging
from datetime import datetime
from typing import List, Optional, Union

import pandas as pd

from .helpers import day_window, resolve_now
from .models import VisitStatus, WeeklyData
from .store import EntityStore, Query

logger = logging.getLogger(__name__)

TREND_DAYS = 7
WEEKDAY_ABBREVIATIONS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
TREND_SERIES = ['photos', 'videos', 'polygons', 'reports']


def weekday_label(day: Union[datetime, pd.Timestamp]) -> str:
    """Three-letter weekday from the ISO weekday (Monday=1 .. Sunday=7)."""
    return WEEKDAY_ABBREVIATIONS[day.isoweekday() - 1]


def calculate_weekly_trends(store: EntityStore, now: Optional[Union[datetime, pd.Timestamp]] = None) -> List[WeeklyData]:
    """
    One bucket per day for the trailing week, oldest first and ending today.

    Each series is its own count over the day's [00:00:00.000, 23:59:59.999]
    window: a completed visit that also mapped a polygon counts in both the
    polygons and the reports series.
    """
    today = resolve_now(now).normalize()
    buckets = []
    for offset in range(TREND_DAYS):
        day = today - pd.DateOffset(days=TREND_DAYS - 1 - offset)
        start, next_start = day_window(day)
        end = next_start - pd.Timedelta(milliseconds=1)

        def media(media_type: str) -> int:
            return store.count(Query('visit_media').eq('media_type', media_type)
                               .gte('created_at', start).lte('created_at', end))

        buckets.append(WeeklyData(
            bucket_date=day.date(),
            day=weekday_label(day),
            photos=media('photo'),
            videos=media('video'),
            polygons=store.count(Query('farm_visits').not_null('polygon_boundaries')
                                 .gte('created_at', start).lte('created_at', end)),
            reports=store.count(Query('farm_visits').eq('status', VisitStatus.COMPLETED.value)
                                .gte('created_at', start).lte('created_at', end)),
        ))
    return buckets


def weekly_trends_frame(buckets: List[WeeklyData]) -> pd.DataFrame:
    """Long-form frame (day, series, count) for charting, preserving bucket order."""
    if not buckets:
        return pd.DataFrame(columns=['day', 'series', 'count'])
    wide = pd.DataFrame([bucket.model_dump() for bucket in buckets])
    long_df = wide.melt(id_vars=['bucket_date', 'day'], value_vars=TREND_SERIES, var_name='series', value_name='count')
    return long_df.sort_values("bucket_date", kind='mergesort').reset_index(drop=True)
