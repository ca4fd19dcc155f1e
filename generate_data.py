import json
import random
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pandas as pd

from config import settings

# --- Configuration for Data Generation ---
NUM_PARTICIPANTS = 120
AVG_EVALUATIONS_PER_PARTICIPANT = 4
STD_DEV_EVALUATIONS = 1.5
DAYS_OF_DATA = 180  # Roughly six months of evaluations
SEED = 42

END_DATE = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
START_DATE = END_DATE - timedelta(days=DAYS_OF_DATA - 1)

LANGUAGES = ["en", "es", "pt", "fr"]
LANGUAGE_WEIGHTS = [0.55, 0.25, 0.12, 0.08]

SEXES = ["M", "F", "m", "f", "", None]
SEX_WEIGHTS = [0.44, 0.44, 0.03, 0.03, 0.03, 0.03]

ROLES = ["Patient", "Caregiver", "Healthy Control", "Clinician", "", None]
ROLE_WEIGHTS = [0.55, 0.15, 0.18, 0.04, 0.04, 0.04]

# Per-composite baseline mean and spread on a 0-100 scale
COMPOSITE_PROFILES = {
    "composite_1": (62.0, 14.0),
    "composite_2": (58.0, 16.0),
    "composite_3": (55.0, 12.0),
}
MALFORMED_COMPOSITE_RATE = 0.04
MALFORMED_VALUES = [None, "", "n/a", "pending"]

rng = np.random.default_rng(SEED)
random.seed(SEED)


def _composite_value(baseline: float, spread: float, drift: float):
    if rng.random() < MALFORMED_COMPOSITE_RATE:
        return random.choice(MALFORMED_VALUES)
    value = float(np.clip(rng.normal(baseline + drift, spread / 3), 0, 100))
    # A small share of scores arrive as numeric strings, as some exports do.
    if rng.random() < 0.02:
        return f"{value:.1f}"
    return round(value, 2)


def generate_participant_records(index: int) -> list:
    participant_id = f"TELL_{index:04d}"
    sex = random.choices(SEXES, SEX_WEIGHTS)[0]
    role = random.choices(ROLES, ROLE_WEIGHTS)[0]
    language = random.choices(LANGUAGES, LANGUAGE_WEIGHTS)[0]
    age = int(np.clip(rng.normal(64, 12), 18, 95)) if rng.random() > 0.03 else None
    baselines = {f: rng.normal(mean, spread) for f, (mean, spread) in COMPOSITE_PROFILES.items()}

    n_evaluations = max(1, int(rng.normal(AVG_EVALUATIONS_PER_PARTICIPANT, STD_DEV_EVALUATIONS)))
    offsets = sorted(rng.integers(0, DAYS_OF_DATA, size=n_evaluations))
    records = []
    for step, offset in enumerate(offsets):
        test_time = START_DATE + timedelta(days=int(offset), hours=int(rng.integers(8, 18)), minutes=int(rng.integers(0, 60)))
        record = {
            "participant_id": participant_id,
            "language": language,
            "sex": sex,
            "age": age,
            "role": role,
            "test_date": test_time.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        for field, baseline in baselines.items():
            record[field] = _composite_value(baseline, COMPOSITE_PROFILES[field][1], drift=-0.8 * step)
        records.append(record)
    return records


def main() -> None:
    records = []
    for index in range(1, NUM_PARTICIPANTS + 1):
        records.extend(generate_participant_records(index))
    records.sort(key=lambda r: r["test_date"])

    output_filepath = Path(settings.SAMPLE_DATA_PATH)
    output_filepath.parent.mkdir(parents=True, exist_ok=True)
    with output_filepath.open("w", encoding="utf-8") as f:
        json.dump(records, f, indent=2)

    summary_df = pd.DataFrame(records)
    print(f"\nGenerated {len(records)} evaluations for {NUM_PARTICIPANTS} participants.")
    print(f"Data saved to {output_filepath.resolve()}")
    print(f"\nDate range of generated evaluations: {START_DATE.strftime('%Y-%m-%d')} to {END_DATE.strftime('%Y-%m-%d')}")
    print("\nSex distribution:")
    print(summary_df["sex"].value_counts(dropna=False))
    print("\nRole distribution:")
    print(summary_df["role"].value_counts(dropna=False))


if __name__ == "__main__":
    main()
