# tell_dashboard/data_processing/helpers.py
# FLUENT RECORD PIPELINE & VALUE UTILITIES
# Value-level helpers shared by the filter, bucketing, delta and trend engines,
# plus a chainable `DataPipeline` that turns parsed JSON records into the
# analytics-ready record frame.

"""
A collection of small, dependable utility functions and a fluent
DataPipeline class for preparing TELL screening records.
"""
import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# --- Standalone Utility Functions ---

NA_REGEX_PATTERN = re.compile(
    r'(?i)^\s*(nan|none|n/a|#n/a|null|undefined|)\s*$'
)
ISO_DATE_PREFIX = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')


def convert_to_numeric(data_input: Any, default_value: Any = np.nan) -> Any:
    """
    Converts a Series or scalar to numeric, turning blank and "Not Available"
    strings into NaN. Numeric strings such as "12.5" are parsed.
    """
    is_series = isinstance(data_input, pd.Series)
    series = data_input if is_series else pd.Series([data_input], dtype=object)

    if pd.api.types.is_object_dtype(series.dtype):
        series = series.map(lambda v: np.nan if isinstance(v, str) and NA_REGEX_PATTERN.match(v) else v)
        series = series.map(lambda v: float(v) if isinstance(v, (bool, np.bool_)) else v)

    numeric_series = pd.to_numeric(series, errors='coerce')
    if not pd.isna(default_value):
        numeric_series = numeric_series.fillna(default_value)

    return numeric_series if is_series else (numeric_series.iloc[0] if not numeric_series.empty else default_value)


def round_half_up(value: float, ndigits: int = 1) -> float:
    """Rounds half away from zero on the decimal representation (2.25 -> 2.3), unlike built-in round()."""
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def is_real_number(value: Any) -> bool:
    """True for genuine numeric values only: no bools, no NaN, no numeric strings."""
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, (int, float, np.integer, np.floating)):
        return not math.isnan(float(value))
    return False


def is_blank_value(value: Any) -> bool:
    """Absent, null and whitespace-only strings are all 'blank'."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def blank_mask(series: pd.Series) -> pd.Series:
    return series.map(is_blank_value).astype(bool)


def date_prefix(value: Any) -> Optional[str]:
    """The calendar-day key of a test date: its first 10 characters, or None if it is not a string."""
    if not isinstance(value, str) or not value:
        return None
    return value[:10]


def to_utc_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parses a date string as a UTC timestamp for charting. Returns None if unparseable."""
    if not isinstance(value, str) or not value:
        return None
    ts = pd.to_datetime(value, utc=True, errors='coerce')
    return None if pd.isna(ts) else ts


def format_date_ddmmyyyy(value: Any, fallback: str = "—") -> str:
    """
    Formats a date as dd/MM/yyyy.

    YYYY-MM-DD strings are rearranged directly so no timezone shift can move
    the day. Other inputs go through UTC parsing.
    """
    if isinstance(value, str):
        match = ISO_DATE_PREFIX.match(value)
        if match:
            year, month, day = match.groups()
            return f"{day}/{month}/{year}"
        ts = to_utc_timestamp(value)
    elif isinstance(value, pd.Timestamp):
        ts = value.tz_convert('UTC') if value.tzinfo else value
    else:
        ts = None
    if ts is None or pd.isna(ts):
        return fallback
    return f"{ts.day:02d}/{ts.month:02d}/{ts.year}"


class DataPipeline:
    """
    A fluent interface for preparing a record frame.

    Usage:
        record_df = (DataPipeline(pd.DataFrame(raw_records, dtype=object))
                     .ensure_columns(settings.RECORD_COLUMNS)
                     .standardize_missing_values()
                     .get_dataframe())
    """
    def __init__(self, df: pd.DataFrame):
        if not isinstance(df, pd.DataFrame):
            raise TypeError("DataPipeline must be initialized with a pandas DataFrame.")
        self.df = df.copy()

    def get_dataframe(self) -> pd.DataFrame:
        return self.df

    def ensure_columns(self, columns: Iterable[str]) -> 'DataPipeline':
        """Adds any missing column as all-None, keeping existing columns and their order."""
        missing: List[str] = [c for c in columns if c not in self.df.columns]
        for col in missing:
            self.df[col] = pd.Series([None] * len(self.df), index=self.df.index, dtype=object)
        if missing:
            logger.debug(f"Added missing record columns: {missing}")
        return self

    def standardize_missing_values(self) -> 'DataPipeline':
        """
        Replaces the NaN placeholders pandas inserts for absent keys with None.
        Present values, including empty strings, are left exactly as loaded.
        """
        if self.df.empty:
            return self
        self.df = self.df.astype(object)
        self.df = self.df.where(self.df.notna(), None)
        return self
