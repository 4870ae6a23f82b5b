# farmetrics_dashboard/config/settings.py
# CENTRALIZED CONFIGURATION HUB

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

settings_logger = logging.getLogger(__name__)

# --- Nested Models for Structured Configuration ---
class TargetConfig(BaseModel):
    """Product defaults applied when an officer has no target row, or a slot in it is empty."""
    default_visit_target: int = 25
    default_total_farm_target: int = 25
    visit_slots: int = 7

class FallbackConfig(BaseModel):
    unknown_officer: str = "Unknown Officer"
    unknown_region: str = "Unknown Region"
    not_available: str = "N/A"
    unknown_initials: str = "UO"

class FeedConfig(BaseModel):
    recent_activity_limit: int = 10; sync_status_limit: int = 8; geographic_limit: int = 8
    stale_sync_hours: int = 24; active_officer_window_days: int = 7
    coordinate_precision: int = 4

# --- Main Settings Class ---
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='FARMETRICS_', case_sensitive=False, env_file='.env', env_file_encoding='utf-8', extra='ignore')

    PROJECT_ROOT_DIR: Path = Path(__file__).resolve().parent.parent
    APP_NAME: str = "Farmetrics"; APP_VERSION: str = "1.2.0"
    ORGANIZATION_NAME: str = "Farmetrics Field Operations"; SUPPORT_CONTACT_INFO: str = "support@farmetrics.org"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    # Observer's calendar for "today", "this month" and the weekly buckets.
    TIMEZONE: str = "UTC"

    DATABASE_URL: Optional[str] = Field(None, description="Set via FARMETRICS_DATABASE_URL to query the managed Postgres backend")
    DATABASE_SCHEMA: Optional[str] = None

    ASSETS_DIR: Path; DATA_SOURCES_DIR: Path; STYLE_CSS_PATH: Path

    @model_validator(mode='before')
    @classmethod
    def set_default_paths(cls, values: Any) -> Any:
        if isinstance(values, dict):
            root = Path(values.get('PROJECT_ROOT_DIR', Path(__file__).resolve().parent.parent))
            assets = root / "assets"
            values.setdefault('ASSETS_DIR', assets); values.setdefault('DATA_SOURCES_DIR', root / "data_sources")
            values.setdefault('STYLE_CSS_PATH', assets / "style_dashboard.css")
        return values

    TARGETS: TargetConfig = TargetConfig(); FALLBACKS: FallbackConfig = FallbackConfig(); FEEDS: FeedConfig = FeedConfig()

    WEB_CACHE_TTL_SECONDS: int = 300
    MAPBOX_STYLE: str = "carto-positron"; MAP_DEFAULT_CENTER: Tuple[float, float] = (0.3476, 32.5825); MAP_DEFAULT_ZOOM: int = 6

    COLOR_PRIMARY: str = "#2563EB"; COLOR_SECONDARY: str = "#546E7A"
    COLOR_BACKGROUND_CONTENT: str = "#FFFFFF"
    COLOR_TEXT_PRIMARY: str = "#343A40"; COLOR_TEXT_HEADINGS: str = "#111827"; COLOR_TEXT_MUTED: str = "#6B7280"
    COLOR_BORDER: str = "#E5E7EB"
    COLOR_STATUS_SUCCESS: str = "#16A34A"; COLOR_STATUS_PENDING: str = "#CA8A04"; COLOR_STATUS_ERROR: str = "#DC2626"
    COLOR_STATUS_PROGRESS: str = "#2563EB"; COLOR_STATUS_UNKNOWN: str = "#6B7280"
    SERIES_COLORS: Dict[str, str] = {"photos": "#3b82f6", "videos": "#ef4444", "polygons": "#10b981", "reports": "#f59e0b"}
    PLOTLY_COLORWAY: List[str] = [COLOR_PRIMARY, COLOR_STATUS_SUCCESS, COLOR_STATUS_PENDING, COLOR_STATUS_ERROR, COLOR_SECONDARY]

    @computed_field
    @property
    def APP_FOOTER_TEXT(self) -> str: return f"© {datetime.now().year} {self.ORGANIZATION_NAME}. Field data collection oversight."

try:
    settings = Settings()
    settings_logger.info(f"Farmetrics settings loaded successfully. App: {settings.APP_NAME} v{settings.APP_VERSION}")
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize Pydantic settings. Error: {e}", exc_info=True)
    raise
