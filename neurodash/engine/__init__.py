"""Engine package exports."""

from .band_analysis import (
    BandAnalysis,
    SymmetryClass,
    TrendAlert,
    analyze,
    classify_by_range,
    classify_symmetry,
    classify_trend_alert,
    compute_ratio,
    compute_severity,
    severity_to_visual_intensity,
)
from .dataset import Dataset, DatasetError, Range, SubjectSeries, TrialSample, load_dataset, subject_min_max
from .playback import PlaybackCursor, PlaybackEngine, PlaybackState

__all__ = [
    "BandAnalysis",
    "SymmetryClass",
    "TrendAlert",
    "analyze",
    "classify_by_range",
    "classify_symmetry",
    "classify_trend_alert",
    "compute_ratio",
    "compute_severity",
    "severity_to_visual_intensity",
    "Dataset",
    "DatasetError",
    "Range",
    "SubjectSeries",
    "TrialSample",
    "load_dataset",
    "subject_min_max",
    "PlaybackCursor",
    "PlaybackEngine",
    "PlaybackState",
]
