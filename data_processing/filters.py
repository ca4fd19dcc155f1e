# tell_dashboard/data_processing/filters.py
# DEMOGRAPHIC / ROLE / AGE FILTER ENGINE

"""
Immutable filter state and the pure filter function that applies it.

The filter never mutates its input and always preserves record order, so
filtering an already-filtered frame with the same state is a no-op.
"""

import logging
from typing import List, Literal

import pandas as pd
from pydantic import BaseModel, ConfigDict, model_validator

from config import settings
from .helpers import blank_mask, convert_to_numeric, is_blank_value

logger = logging.getLogger(__name__)

SexFilter = Literal["all", "male", "female", "blank"]


class FilterState(BaseModel):
    """The sidebar filter selection. Defaults are the 'no filter' state."""
    model_config = ConfigDict(frozen=True)

    sex: SexFilter = "all"
    age_min: int = settings.FILTERS.age_min
    age_max: int = settings.FILTERS.age_max
    role: str = settings.FILTERS.all_roles_label

    @model_validator(mode='after')
    def clamp_age_range(self) -> 'FilterState':
        # Both bounds set at once: a minimum above the maximum snaps down to it.
        if self.age_min > self.age_max:
            object.__setattr__(self, 'age_min', self.age_max)
        return self

    @property
    def is_default_age_range(self) -> bool:
        return (self.age_min, self.age_max) == (settings.FILTERS.age_min, settings.FILTERS.age_max)

    @property
    def is_default(self) -> bool:
        return self == FilterState()


def _sex_mask(df: pd.DataFrame, sex: str) -> pd.Series:
    if sex == "all":
        return pd.Series(True, index=df.index)
    if sex == "blank":
        return blank_mask(df['sex'])
    target = settings.FILTERS.sex_codes[sex]
    return df['sex'].map(lambda v: isinstance(v, str) and v.upper() == target).astype(bool)


def _age_mask(df: pd.DataFrame, age_min: int, age_max: int) -> pd.Series:
    ages = convert_to_numeric(df['age'])
    return (ages.notna() & (ages >= age_min) & (ages <= age_max)).astype(bool)


def _role_mask(df: pd.DataFrame, role: str) -> pd.Series:
    if role == settings.FILTERS.all_roles_label:
        return pd.Series(True, index=df.index)
    if role == settings.FILTERS.blank_role_label:
        return blank_mask(df['role'])
    return df['role'].map(lambda v: isinstance(v, str) and v == role).astype(bool)


def apply_filters(df: pd.DataFrame, state: FilterState) -> pd.DataFrame:
    """
    Applies the sex, age and role predicates (ANDed) and returns a new frame.

    The age predicate is skipped entirely while the range is at its default,
    so records without an age are only dropped once the user narrows it.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        return df.copy() if isinstance(df, pd.DataFrame) else pd.DataFrame(columns=settings.RECORD_COLUMNS)

    mask = _sex_mask(df, state.sex) & _role_mask(df, state.role)
    if not state.is_default_age_range:
        mask &= _age_mask(df, state.age_min, state.age_max)

    filtered = df.loc[mask].copy()
    logger.debug(f"Filter {state.model_dump()} kept {len(filtered)} of {len(df)} records.")
    return filtered


def get_unique_roles(df: pd.DataFrame) -> List[str]:
    """Sorted distinct non-blank roles, with the 'Blank' option first when any record lacks a role."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return []
    roles = sorted({v for v in df['role'] if not is_blank_value(v) and isinstance(v, str)})
    if blank_mask(df['role']).any():
        roles.insert(0, settings.FILTERS.blank_role_label)
    return roles


def has_blank_sex(df: pd.DataFrame) -> bool:
    return isinstance(df, pd.DataFrame) and not df.empty and bool(blank_mask(df['sex']).any())


def build_filter_summary(state: FilterState, filtered_count: int, total_loaded: int) -> str:
    """The one-line description of the active filters shown above the group overview."""
    if total_loaded == 0:
        return "No records to display. Adjust filters or load a JSON file."
    sex_text = {"all": "All", "blank": "Blank (no data)", "male": "Male", "female": "Female"}[state.sex]
    role_text = "Blank (no data)" if state.role == settings.FILTERS.blank_role_label else state.role
    return (f"Showing data for {filtered_count} records. Age {state.age_min}–{state.age_max}. "
            f"Sex: {sex_text}. Role: {role_text}.")
