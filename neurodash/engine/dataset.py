"""Trial dataset loading: CSV rows -> per-subject trial sequences."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from neurodash.engine.band_analysis import RATIO_FLOOR
from neurodash.utils.logging_cfg import get_logger

log = get_logger(__name__)

SUBJECT_COL = "subject_number"
TRIAL_COL = "trial_number"
# CSV column -> TrialSample field
BAND_COLUMNS: Dict[str, str] = {
    "Alpha": "alpha",
    "Beta": "beta",
    "Theta": "theta",
    "Delta": "delta",
}
OPTIONAL_COLUMNS: Dict[str, str] = {
    "Aperiodic_Slope": "aperiodic_slope",
    "BSI": "bsi",
}
REQUIRED_COLUMNS: Tuple[str, ...] = (SUBJECT_COL, TRIAL_COL, *BAND_COLUMNS)

NAN = float("nan")


class DatasetError(ValueError):
    """Raised when a data file cannot be read or lacks required columns."""


class Range(NamedTuple):
    min: float
    max: float


@dataclass(frozen=True)
class TrialSample:
    subject: str
    trial_index: float
    alpha: float = NAN
    beta: float = NAN
    theta: float = NAN
    delta: float = NAN
    aperiodic_slope: float = NAN
    bsi: float = NAN

    @property
    def adr(self) -> float:
        return self.alpha / max(self.delta, RATIO_FLOOR)

    @property
    def tar(self) -> float:
        return self.theta / max(self.alpha, RATIO_FLOOR)

    @property
    def has_slope(self) -> bool:
        return math.isfinite(self.aperiodic_slope)

    @property
    def has_bsi(self) -> bool:
        return math.isfinite(self.bsi)


@dataclass(frozen=True)
class SubjectSeries:
    subject: str
    samples: Tuple[TrialSample, ...]

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, idx: int) -> TrialSample:
        return self.samples[idx]

    @property
    def last_index(self) -> int:
        return len(self.samples) - 1


@dataclass(frozen=True)
class Dataset:
    subjects: Tuple[SubjectSeries, ...] = ()
    source: Optional[str] = None

    @classmethod
    def empty(cls) -> "Dataset":
        return cls()

    def __len__(self) -> int:
        return len(self.subjects)

    def __getitem__(self, idx: int) -> SubjectSeries:
        return self.subjects[idx]

    @property
    def is_ready(self) -> bool:
        return len(self.subjects) > 0

    @property
    def last_index(self) -> int:
        return len(self.subjects) - 1

    @property
    def row_count(self) -> int:
        return sum(len(s) for s in self.subjects)

    @property
    def has_slope(self) -> bool:
        return any(t.has_slope for s in self.subjects for t in s.samples)

    @property
    def has_bsi(self) -> bool:
        return any(t.has_bsi for s in self.subjects for t in s.samples)


def _to_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return NAN


def _frame_to_dataset(df: pd.DataFrame, source: Optional[str]) -> Dataset:
    df = df.copy()
    df[SUBJECT_COL] = df[SUBJECT_COL].astype("string").str.strip()
    df[SUBJECT_COL] = df[SUBJECT_COL].replace("", pd.NA)
    numeric_cols = [TRIAL_COL, *BAND_COLUMNS, *OPTIONAL_COLUMNS]
    for col in numeric_cols:
        if col not in df.columns:
            df[col] = np.nan
        df[col] = pd.to_numeric(df[col], errors="coerce")

    dropped = len(df)
    df = df[df[SUBJECT_COL].notna() & np.isfinite(df[TRIAL_COL].astype(float))]
    dropped -= len(df)
    if dropped:
        log.debug("Dropped %d rows without subject/trial", dropped)

    subjects: List[SubjectSeries] = []
    for subject, group in df.groupby(SUBJECT_COL, sort=False):
        group = group.sort_values(TRIAL_COL, kind="mergesort")
        samples = tuple(
            TrialSample(
                subject=str(subject),
                trial_index=float(row[TRIAL_COL]),
                **{field: _to_float(row[col]) for col, field in {**BAND_COLUMNS, **OPTIONAL_COLUMNS}.items()},
            )
            for _, row in group.iterrows()
        )
        subjects.append(SubjectSeries(subject=str(subject), samples=samples))
    return Dataset(subjects=tuple(subjects), source=source)


def build_dataset(rows: Iterable[Mapping[str, object]], source: Optional[str] = None) -> Dataset:
    """Group already-parsed rows (CSV column names as keys) into a Dataset."""
    records = list(rows)
    if not records:
        return Dataset.empty()
    df = pd.DataFrame.from_records(records)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DatasetError(f"Missing required columns: {', '.join(missing)}")
    return _frame_to_dataset(df, source)


def load_dataset(path: Union[str, Path]) -> Dataset:
    """Read a headered CSV into a Dataset grouped by subject (first-seen order)."""
    p = Path(path).expanduser()
    if not p.exists():
        raise DatasetError(f"Data file not found: {p}")
    try:
        df = pd.read_csv(p, dtype={SUBJECT_COL: str}, skip_blank_lines=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DatasetError(f"Could not parse {p}: {exc}") from exc
    except OSError as exc:
        raise DatasetError(f"Could not read {p}: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DatasetError(f"Missing required columns in {p.name}: {', '.join(missing)}")
    dataset = _frame_to_dataset(df, source=str(p))
    log.info("Loaded %s: %d subjects, %d trials", p.name, len(dataset), dataset.row_count)
    return dataset


def subject_min_max(samples: Sequence[TrialSample], key: str) -> Range:
    """(min, max) of the finite ``key`` values; degenerate ranges are widened."""
    vals = [v for v in (getattr(s, key, NAN) for s in samples) if math.isfinite(v)]
    if not vals:
        return Range(0.0, 1.0)
    lo = min(vals)
    hi = max(vals)
    if lo == hi:
        eps = max(0.001, abs(lo) * 0.05)
        lo -= eps
        hi += eps
    return Range(lo, hi)


__all__ = [
    "DatasetError",
    "Range",
    "TrialSample",
    "SubjectSeries",
    "Dataset",
    "REQUIRED_COLUMNS",
    "build_dataset",
    "load_dataset",
    "subject_min_max",
]
