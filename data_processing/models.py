# farmetrics_dashboard/data_processing/models.py
# VIEW MODELS & STATUS LOOKUP TABLES

"""
Typed shapes produced by the aggregation functions and consumed by the pages.

Status-to-display lookups are total mappings over their enums, so a new
status member without a display entry fails at import time rather than
rendering inconsistently.
"""

from datetime import date as date_type, datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from pydantic import BaseModel, Field

from config import settings


class VisitStatus(str, Enum):
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    IN_PROGRESS = "in_progress"
    PENDING = "pending"


class SyncState(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    ERROR = "error"


class OfficerRole(str, Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    ANALYST = "analyst"
    FIELD_OFFICER = "field_officer"


class IssueStatus(str, Enum):
    OPEN = "open"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class StatusDisplay(NamedTuple):
    label: str
    color_key: str
    priority: int = 0


SYNC_STATE_DISPLAY: Dict[SyncState, StatusDisplay] = {
    SyncState.ERROR: StatusDisplay("Sync Error", "status_error", 0),
    SyncState.PENDING: StatusDisplay("Pending", "status_pending", 1),
    SyncState.SUCCESS: StatusDisplay("Synced", "status_success", 2),
}

ACTIVITY_STATUS_DISPLAY: Dict[str, StatusDisplay] = {
    VisitStatus.COMPLETED.value: StatusDisplay("Approved", "status_success"),
    VisitStatus.PENDING.value: StatusDisplay("Pending Review", "status_pending"),
    VisitStatus.IN_PROGRESS.value: StatusDisplay("In Progress", "status_progress"),
}
UNKNOWN_STATUS_DISPLAY = StatusDisplay("Unknown", "status_unknown", 99)

if set(SYNC_STATE_DISPLAY) != set(SyncState):
    raise RuntimeError("Every sync state needs a display entry.")


def activity_status_display(status: Optional[str]) -> StatusDisplay:
    return ACTIVITY_STATUS_DISPLAY.get(status or "", UNKNOWN_STATUS_DISPLAY)


# --- Dashboard ---

class DashboardMetrics(BaseModel):
    today_submissions: int = 0
    farm_polygons_mapped: int = 0
    monthly_media_files: int = 0
    active_field_officers: int = 0
    pending_reviews: int = 0
    reports_submitted: int = 0
    data_quality_score: int = 0
    sync_success_rate: int = 0


class WeeklyData(BaseModel):
    bucket_date: date_type
    day: str
    photos: int = 0
    videos: int = 0
    polygons: int = 0
    reports: int = 0


class ActivityItem(BaseModel):
    id: str
    officer_name: str
    officer_initials: str
    region: str
    submission_type: str
    timestamp: Optional[datetime] = None
    status: Optional[str] = None

    @property
    def display(self) -> StatusDisplay:
        return activity_status_display(self.status)


class SyncStatus(BaseModel):
    officer_id: str
    officer_name: str
    status: SyncState
    last_sync: datetime
    total_submissions: int = 0

    @property
    def display(self) -> StatusDisplay:
        return SYNC_STATE_DISPLAY[self.status]


class Coordinates(BaseModel):
    lat: float
    lng: float

    def label(self, precision: Optional[int] = None) -> str:
        places = settings.FEEDS.coordinate_precision if precision is None else precision
        return f"{self.lat:.{places}f}, {self.lng:.{places}f}"


class GeographicSubmission(BaseModel):
    id: str
    region: str
    coordinates: Optional[Coordinates] = None
    officer_name: str
    submission_type: str
    timestamp: Optional[datetime] = None


# --- Officers ---

class SlotProgress(BaseModel):
    slot: int
    completed: int = 0
    target: int
    percentage: int = 0


class OfficerProgress(BaseModel):
    id: str
    full_name: str
    uai_code: Optional[str] = None
    region: Optional[str] = None
    sub_county: Optional[str] = None
    supervisor_name: Optional[str] = None
    is_active: bool = True
    total_farm_target: int
    total_visits: int = 0
    progress_percentage: int = 0
    slots: List[SlotProgress] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class OfficerStats(BaseModel):
    """One row of the officer reports listing."""
    id: str
    full_name: str
    uai_code: Optional[str] = None
    phone_number: Optional[str] = None
    region: Optional[str] = None
    sub_county: Optional[str] = None
    is_active: bool = False
    created_at: Optional[datetime] = None
    visit_count: int = 0
    farmer_count: int = 0
    progress_percentage: int = 0
    last_visit: Optional[datetime] = None


class OfficerSummary(BaseModel):
    total: int = 0
    active: int = 0
    total_visits: int = 0
    total_farmers: int = 0
