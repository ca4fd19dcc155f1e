# tell_dashboard/tests/conftest.py
# PYTEST FIXTURES

import sys
from pathlib import Path

# --- Path Setup for Module Imports ---
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pandas as pd
import pytest

from data_processing import load_records

# --- Core Data Fixtures ---

@pytest.fixture(scope="session")
def raw_records() -> list:
    """A small, hand-built TELL record set covering blanks and malformed values."""
    return [
        {"participant_id": "P001", "language": "en", "sex": "M", "age": 70, "role": "Patient",
         "test_date": "2024-05-30T10:00:00Z", "composite_1": 40, "composite_2": 50, "composite_3": 60},
        {"participant_id": "P001", "language": "en", "sex": "M", "age": 70, "role": "Patient",
         "test_date": "2024-06-02T09:00:00Z", "composite_1": 46, "composite_2": 44, "composite_3": 62},
        {"participant_id": "P002", "language": "es", "sex": "f", "age": 55, "role": "Caregiver",
         "test_date": "2024-05-30T15:00:00Z", "composite_1": 20, "composite_2": 70, "composite_3": None},
        {"participant_id": "P003", "language": "en", "sex": "", "age": 17, "role": "",
         "test_date": "2024-06-01T08:30:00Z", "composite_1": "n/a", "composite_2": 30, "composite_3": 45},
        {"participant_id": "P004", "language": "pt", "sex": None, "role": "Healthy Control",
         "test_date": "2024-06-05", "composite_1": 80, "composite_2": "12", "composite_3": 50},
        {"participant_id": "P005", "language": "fr", "sex": "F", "age": 121, "role": "Patient",
         "composite_1": 60, "composite_2": 60, "composite_3": 60},
    ]


@pytest.fixture(scope="session")
def records_df(raw_records) -> pd.DataFrame:
    """The validated record frame built from `raw_records`."""
    return load_records(raw_records)
