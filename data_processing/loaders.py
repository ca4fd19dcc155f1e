# tell_dashboard/data_processing/loaders.py
# RECORD VALIDATION & LOADING

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, Field

from config import settings
from .helpers import DataPipeline

logger = logging.getLogger(__name__)

# --- Load Errors ---

class RecordLoadError(Exception):
    """Base class for user-visible, non-fatal record loading failures."""
    user_message: str = "Could not load records."

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail


class ParseFailureError(RecordLoadError):
    """The input is not syntactically valid JSON."""
    user_message = "Invalid JSON file format"


class InvalidFormatError(RecordLoadError):
    """The input is valid JSON but its top-level value is not an array of objects."""
    user_message = "Invalid JSON: Expected an array of objects"

# --- Pydantic Model for the Record Source Contract ---

class JsonRecordsConfig(BaseModel):
    """Defines the contract for a TELL JSON record source."""
    path_setting: str = 'SAMPLE_DATA_PATH'
    expected_cols: List[str] = Field(default_factory=lambda: list(settings.RECORD_COLUMNS))
    encoding: str = 'utf-8'

RECORDS_CONFIG = JsonRecordsConfig()

# --- Main Loading Functions ---

def load_records(raw: Any) -> pd.DataFrame:
    """
    Validates an already-parsed JSON value and returns the record frame.

    Only the top-level shape is checked: the value must be a list of objects.
    Field values pass through unchanged; downstream engines each apply their
    own policy to missing or non-numeric values. Missing standard columns are
    added as all-None columns.

    Raises:
        InvalidFormatError: if `raw` is not a list, or any item is not an object.
    """
    if not isinstance(raw, list):
        logger.warning(f"Rejected record load: top-level value is {type(raw).__name__}, not an array.")
        raise InvalidFormatError(f"top-level value is {type(raw).__name__}")

    bad_items = [i for i, item in enumerate(raw) if not isinstance(item, dict)]
    if bad_items:
        logger.warning(f"Rejected record load: {len(bad_items)} non-object item(s), first at index {bad_items[0]}.")
        raise InvalidFormatError(f"item {bad_items[0]} is not an object")

    df = pd.DataFrame.from_records(raw) if raw else pd.DataFrame()
    record_df = (DataPipeline(df)
        .ensure_columns(RECORDS_CONFIG.expected_cols)
        .standardize_missing_values()
        .get_dataframe()
    )
    logger.info(f"Successfully loaded {len(record_df)} TELL records.")
    return record_df


def parse_records_json(content: Union[str, bytes, bytearray]) -> pd.DataFrame:
    """
    Parses raw JSON text (or bytes) and validates it into a record frame.

    Raises:
        ParseFailureError: if the content cannot be decoded or is not valid JSON.
        InvalidFormatError: if the JSON is valid but not an array of objects.
    """
    try:
        if isinstance(content, (bytes, bytearray)):
            content = content.decode(RECORDS_CONFIG.encoding)
        parsed = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Rejected record load: could not parse JSON ({e}).")
        raise ParseFailureError(str(e)) from e
    return load_records(parsed)


def load_records_file(filepath_override: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """Reads a JSON records file (default: the configured sample data path) into a record frame."""
    path = Path(filepath_override) if filepath_override else getattr(settings, RECORDS_CONFIG.path_setting)
    if not path or not Path(path).is_file():
        logger.error(f"Records file not found at: {path}")
        raise FileNotFoundError(f"Records file not found at: {path}")
    logger.debug(f"Reading records from {Path(path).resolve()}")
    return parse_records_json(Path(path).read_bytes())
