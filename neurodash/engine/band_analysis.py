"""Band analysis core (compute-only, no UI).

Pure functions over an instantaneous band-power reading:
- Severity score in [0, 1] plus its perceptual re-gain for rendering.
- ADR / TAR ratios with a denominator floor (never an output clamp).
- Gauge range classification (two- or three-bucket policy per metric).
- Trend alert from a trailing aperiodic-slope window.
- Symmetry class from a signed BSI.

Thresholds for the trend alert and BSI are heuristics carried as constants;
they are not clinically validated.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple

# Severity thresholds and weights
ALPHA_LOW_TH = 9.0
THETA_HIGH_TH = 5.5
DELTA_HIGH_TH = 3.5
TAR_OFFSET, TAR_SCALE = 0.4, 1.2
DAR_OFFSET, DAR_SCALE = 0.2, 1.0
W_ALPHA_LOW = 0.15
W_THETA_HIGH = 0.30
W_DELTA_HIGH = 0.30
W_TAR = 0.15
W_DAR = 0.10
SUPPRESSION_BONUS = 0.2
SEVERITY_GAIN = 1.4

# Rendering re-gain
VISUAL_EXPONENT = 0.7
VISUAL_GAIN = 1.1

RATIO_FLOOR = 0.1

TREND_HIGH_TH = 0.3
TREND_MEDIUM_TH = 0.15
BSI_SYMMETRIC_TH = 0.1
BSI_MILD_TH = 0.3

BUCKET_LABELS: Dict[int, Tuple[str, ...]] = {
    2: ("GOOD", "BAD"),
    3: ("GREEN", "YELLOW", "RED"),
}
BUCKET_COLORS: Dict[str, str] = {
    "GOOD": "#2E7D32",
    "GREEN": "#2E7D32",
    "YELLOW": "#FBC02D",
    "BAD": "#D32F2F",
    "RED": "#D32F2F",
}


class TrendAlert(str, Enum):
    NORMAL = "NORMAL"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SymmetryClass(str, Enum):
    SYMMETRIC = "SYMMETRIC"
    MILD = "MILD"
    SIGNIFICANT = "SIGNIFICANT"


TREND_ALERT_LABELS: Dict[TrendAlert, str] = {
    TrendAlert.NORMAL: "STABLE",
    TrendAlert.MEDIUM: "MODERATE CHANGE",
    TrendAlert.HIGH: "RAPID CHANGE",
}
TREND_ALERT_COLORS: Dict[TrendAlert, str] = {
    TrendAlert.NORMAL: "#2E7D32",
    TrendAlert.MEDIUM: "#FBC02D",
    TrendAlert.HIGH: "#D32F2F",
}
SYMMETRY_LABELS: Dict[SymmetryClass, str] = {
    SymmetryClass.SYMMETRIC: "Symmetric",
    SymmetryClass.MILD: "Mild Asymmetry",
    SymmetryClass.SIGNIFICANT: "Significant Asymmetry",
}
SYMMETRY_COLORS: Dict[SymmetryClass, str] = {
    SymmetryClass.SYMMETRIC: "#2E7D32",
    SymmetryClass.MILD: "#FBC02D",
    SymmetryClass.SIGNIFICANT: "#D32F2F",
}


@dataclass(frozen=True)
class BandAnalysis:
    severity: float
    visual_intensity: float
    adr: float
    tar: float
    trend_alert: Optional[TrendAlert] = None
    symmetry_class: Optional[SymmetryClass] = None
    hemisphere: Optional[str] = None

    @property
    def ratios(self) -> Dict[str, float]:
        return {"adr": self.adr, "tar": self.tar}

    def to_dict(self) -> Dict[str, object]:
        out = asdict(self)
        out["ratios"] = self.ratios
        return out


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def finite_or_zero(value: object) -> float:
    """Coerce to a finite float; None, NaN, inf and unparsable values become 0."""
    try:
        v = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def compute_severity(alpha: object, theta: object, delta: object) -> float:
    """Heuristic 0-1 severity from alpha, theta and delta band powers."""
    alpha = finite_or_zero(alpha)
    theta = finite_or_zero(theta)
    delta = finite_or_zero(delta)

    alpha_low = clamp((ALPHA_LOW_TH - alpha) / ALPHA_LOW_TH, 0.0, 1.0)
    theta_high = clamp((theta - THETA_HIGH_TH) / THETA_HIGH_TH, 0.0, 1.0)
    delta_high = clamp((delta - DELTA_HIGH_TH) / DELTA_HIGH_TH, 0.0, 1.0)

    safe_alpha = max(alpha, RATIO_FLOOR)
    tar = theta / safe_alpha
    dar = delta / safe_alpha
    tar_norm = clamp((tar - TAR_OFFSET) / TAR_SCALE, 0.0, 1.0)
    dar_norm = clamp((dar - DAR_OFFSET) / DAR_SCALE, 0.0, 1.0)

    severity = (
        W_ALPHA_LOW * alpha_low
        + W_THETA_HIGH * theta_high
        + W_DELTA_HIGH * delta_high
        + W_TAR * tar_norm
        + W_DAR * dar_norm
    )
    # Alpha suppressed below both slow bands at once.
    if alpha < theta and alpha < delta:
        severity += SUPPRESSION_BONUS
    return clamp(severity * SEVERITY_GAIN, 0.0, 1.0)


def severity_to_visual_intensity(severity: float) -> float:
    return clamp(math.pow(clamp(finite_or_zero(severity), 0.0, 1.0), VISUAL_EXPONENT) * VISUAL_GAIN, 0.0, 1.0)


def compute_ratio(numerator: float, denominator: float, floor: float = RATIO_FLOOR) -> float:
    """numerator / max(denominator, floor); unbounded above. Non-finite inputs count as 0."""
    return finite_or_zero(numerator) / max(finite_or_zero(denominator), floor)


def gauge_position(
    value: float,
    rng: Tuple[float, float],
    invert: bool = False,
    gamma: float = 1.0,
) -> float:
    """Normalized 0-1 needle position of ``value`` within ``rng``; 1 is the abnormal end."""
    lo, hi = rng
    denom = (hi - lo) or 1.0
    raw = clamp((finite_or_zero(value) - lo) / denom, 0.0, 1.0)
    pos = 1.0 - raw if invert else raw
    if gamma != 1.0:
        pos = clamp(math.pow(pos, gamma), 0.0, 1.0)
    return pos


def classify_by_range(
    value: float,
    rng: Tuple[float, float],
    buckets: int = 3,
    invert: bool = False,
    gamma: float = 1.0,
) -> str:
    if buckets not in BUCKET_LABELS:
        raise ValueError(f"Unsupported bucket count: {buckets}")
    pos = gauge_position(value, rng, invert=invert, gamma=gamma)
    labels = BUCKET_LABELS[buckets]
    if buckets == 2:
        return labels[0] if pos <= 0.5 else labels[1]
    if pos < 1.0 / 3.0:
        return labels[0]
    if pos < 2.0 / 3.0:
        return labels[1]
    return labels[2]


def classify_trend_alert(
    slope_history: Sequence[float],
    current_index: int,
    window_size: int = 5,
) -> TrendAlert:
    """Rate-of-change alert over the trailing window ending at ``current_index``."""
    start = max(0, current_index - window_size)
    recent = [finite_or_zero(s) for s in slope_history[start : current_index + 1]]
    if len(recent) > 1:
        change = abs(recent[-1] - recent[0]) / len(recent)
    else:
        change = 0.0
    if change > TREND_HIGH_TH:
        return TrendAlert.HIGH
    if change > TREND_MEDIUM_TH:
        return TrendAlert.MEDIUM
    return TrendAlert.NORMAL


def classify_symmetry(bsi: float) -> SymmetryClass:
    level = abs(finite_or_zero(bsi))
    if level < BSI_SYMMETRIC_TH:
        return SymmetryClass.SYMMETRIC
    if level < BSI_MILD_TH:
        return SymmetryClass.MILD
    return SymmetryClass.SIGNIFICANT


def affected_hemisphere(bsi: float) -> Optional[str]:
    """Negative BSI points at the left hemisphere, positive at the right."""
    b = finite_or_zero(bsi)
    if b < 0:
        return "left"
    if b > 0:
        return "right"
    return None


def analyze(
    reading: Mapping[str, object],
    slope_history: Optional[Sequence[float]] = None,
    current_index: Optional[int] = None,
    window_size: int = 5,
) -> BandAnalysis:
    """Severity, ratios and optional trend/symmetry classes for one reading."""
    alpha = finite_or_zero(reading.get("alpha"))
    theta = finite_or_zero(reading.get("theta"))
    delta = finite_or_zero(reading.get("delta"))

    severity = compute_severity(alpha, theta, delta)
    trend_alert = None
    if slope_history is not None:
        idx = len(slope_history) - 1 if current_index is None else current_index
        trend_alert = classify_trend_alert(slope_history, idx, window_size=window_size)
    symmetry_class = None
    hemisphere = None
    if reading.get("bsi") is not None:
        symmetry_class = classify_symmetry(reading["bsi"])  # type: ignore[arg-type]
        hemisphere = affected_hemisphere(reading["bsi"])  # type: ignore[arg-type]

    return BandAnalysis(
        severity=severity,
        visual_intensity=severity_to_visual_intensity(severity),
        adr=compute_ratio(alpha, delta),
        tar=compute_ratio(theta, alpha),
        trend_alert=trend_alert,
        symmetry_class=symmetry_class,
        hemisphere=hemisphere,
    )


__all__ = [
    "TrendAlert",
    "SymmetryClass",
    "BandAnalysis",
    "BUCKET_LABELS",
    "BUCKET_COLORS",
    "TREND_ALERT_LABELS",
    "TREND_ALERT_COLORS",
    "SYMMETRY_LABELS",
    "SYMMETRY_COLORS",
    "clamp",
    "finite_or_zero",
    "compute_severity",
    "severity_to_visual_intensity",
    "compute_ratio",
    "gauge_position",
    "classify_by_range",
    "classify_trend_alert",
    "classify_symmetry",
    "affected_hemisphere",
    "analyze",
]
