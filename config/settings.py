# tell_dashboard/config/settings.py
# CENTRALIZED CONFIGURATION HUB

import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

settings_logger = logging.getLogger(__name__)

# --- Nested Models for Structured Configuration ---
class FilterDefaults(BaseModel):
    age_min: int = 18; age_max: int = 120
    all_roles_label: str = "All Roles"; blank_role_label: str = "Blank"
    sex_options: List[str] = ["all", "male", "female", "blank"]
    sex_codes: Dict[str, str] = {"male": "M", "female": "F"}

class AnalyticsConfig(BaseModel):
    percentage_decimals: int = 1; kpi_decimals: int = 1
    no_data_sentinel: str = "—"
    timeline_view_modes: List[str] = ["full", "before", "after"]

class RiskBucketDisplay(BaseModel):
    key: str
    label: str
    color: str

# --- Main Settings Class ---
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='TELL_', case_sensitive=False, env_file='.env', env_file_encoding='utf-8', extra='ignore')

    PROJECT_ROOT_DIR: Path = Path(__file__).resolve().parent.parent
    APP_NAME: str = "TELL Screening Dashboard"; APP_VERSION: str = "1.0.0"
    ORGANIZATION_NAME: str = "TELL Clinical Research"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    ASSETS_DIR: Optional[Path] = None; DATA_SOURCES_DIR: Optional[Path] = None
    STYLE_CSS_PATH: Optional[Path] = None; SAMPLE_DATA_PATH: Optional[Path] = None

    @model_validator(mode='before')
    @classmethod
    def set_default_paths(cls, values):
        if isinstance(values, dict):
            root = Path(values.get('PROJECT_ROOT_DIR', Path(__file__).resolve().parent.parent))
            assets = root / "assets"; data = root / "data_sources"
            values.setdefault('ASSETS_DIR', assets); values.setdefault('DATA_SOURCES_DIR', data)
            values.setdefault('STYLE_CSS_PATH', assets / "style_dashboard.css")
            values.setdefault('SAMPLE_DATA_PATH', data / "tell_records_sample.json")
        return values

    RECORD_COLUMNS: List[str] = ["participant_id", "language", "sex", "age", "role", "test_date", "composite_1", "composite_2", "composite_3"]
    COMPOSITE_FIELDS: List[str] = ["composite_1", "composite_2", "composite_3"]
    COMPOSITE_DISPLAY_NAMES: Dict[str, str] = {"composite_1": "Parkinson", "composite_2": "Alzheimer", "composite_3": "Overall Severity Level"}
    COMPOSITE_SHORT_NAMES: Dict[str, str] = {"composite_1": "Composite 1", "composite_2": "Composite 2", "composite_3": "Composite 3"}

    FILTERS: FilterDefaults = FilterDefaults(); ANALYTICS: AnalyticsConfig = AnalyticsConfig()

    COLOR_PRIMARY: str = "#1E3A8A"; COLOR_SECONDARY: str = "#546E7A"
    COLOR_BACKGROUND_CONTENT: str = "#FFFFFF"
    COLOR_TEXT_PRIMARY: str = "#343A40"; COLOR_TEXT_HEADINGS: str = "#111827"; COLOR_TEXT_MUTED: str = "#6C757D"
    COLOR_RISK_HIGH: str = "#D32F2F"; COLOR_RISK_MODERATE: str = "#FFC107"; COLOR_RISK_LOW: str = "#4CAF50"
    COLOR_DELTA_POSITIVE: str = "#16A34A"; COLOR_DELTA_NEGATIVE: str = "#DC2626"; COLOR_EVENT_MARKER: str = "#7C3AED"
    COMPOSITE_COLORS: Dict[str, str] = {"composite_1": "#1E3A8A", "composite_2": "#DC2626", "composite_3": "#D97706"}

    WEB_CACHE_TTL_SECONDS: int = 3600

    @computed_field
    @property
    def RISK_BUCKETS(self) -> List[RiskBucketDisplay]:
        return [
            RiskBucketDisplay(key="normal", label="Unconcerning", color=self.COLOR_RISK_LOW),
            RiskBucketDisplay(key="atRisk", label="Monitor", color=self.COLOR_RISK_MODERATE),
            RiskBucketDisplay(key="highRisk", label="Check", color=self.COLOR_RISK_HIGH),
        ]

    @computed_field
    @property
    def PLOTLY_COLORWAY(self) -> List[str]: return [self.COMPOSITE_COLORS[f] for f in self.COMPOSITE_FIELDS] + [self.COLOR_SECONDARY]

try:
    settings = Settings()
    settings_logger.info(f"TELL settings loaded successfully. App: {settings.APP_NAME} v{settings.APP_VERSION}")
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize Pydantic settings. Error: {e}", exc_info=True)
    raise
