"""Configuration constants and default paths for neurodash."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

# Project root inferred from this file's location.
ROOT_DIR = Path(__file__).resolve().parent.parent

# Default paths
DATA_DIR = Path(os.getenv("NEURODASH_DATA_DIR", str(ROOT_DIR / "data")))
DATA_PATH = Path(os.getenv("NEURODASH_DATA_PATH", str(DATA_DIR / "feature_analysis_data.csv")))
LOG_PATH: Optional[Path] = Path(os.environ["NEURODASH_LOG_PATH"]) if os.getenv("NEURODASH_LOG_PATH") else None
LOG_LEVEL: str = os.getenv("NEURODASH_LOG_LEVEL", "INFO").upper()

# Playback
STEP_DURATION_MS: float = 1200.0
FRAME_INTERVAL_MS: int = int(os.getenv("NEURODASH_FRAME_INTERVAL_MS", "100"))

# Rendering
RADIAL_SEGMENTS: int = 6
TREND_WINDOW: int = 5


@dataclass(frozen=True)
class GaugeConfig:
    """Per-metric gauge policy: bucket count, needle inversion and gamma."""

    key: str
    title: str
    buckets: int = 3
    invert: bool = False
    gamma: float = 1.0


@dataclass(frozen=True)
class DashboardVariant:
    name: str
    title: str
    components: Tuple[str, ...]
    gauges: Tuple[GaugeConfig, ...] = field(default_factory=tuple)


def _gauges(buckets: int, gamma: float = 1.0) -> Tuple[GaugeConfig, ...]:
    # Low ADR is the abnormal end, so its needle runs inverted.
    return (
        GaugeConfig("adr", "ADR (Alpha/Delta)", buckets=buckets, invert=True, gamma=gamma),
        GaugeConfig("tar", "TAR (Theta/Alpha)", buckets=buckets, invert=False, gamma=gamma),
    )


DASHBOARD_VARIANTS: Dict[str, DashboardVariant] = {
    "radar": DashboardVariant("radar", "Radar", ("radar",)),
    "gauges": DashboardVariant("gauges", "Radar + Gauges", ("radar", "gauges"), _gauges(3)),
    "arrow": DashboardVariant("arrow", "Radar + Arrow Gauges", ("radar", "gauges"), _gauges(2, gamma=0.55)),
    "extended": DashboardVariant(
        "extended",
        "Extended",
        ("radar", "gauges", "trend", "symmetry"),
        _gauges(3),
    ),
}
DEFAULT_VARIANT: str = os.getenv("NEURODASH_VARIANT", "extended")


def get_variant(name: Optional[str]) -> DashboardVariant:
    """Return the named variant, falling back to DEFAULT_VARIANT."""
    return DASHBOARD_VARIANTS.get(name or DEFAULT_VARIANT, DASHBOARD_VARIANTS["extended"])


def ensure_required_paths() -> None:
    """Create required runtime directories if they do not exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    if LOG_PATH is not None:
        LOG_PATH.parent.mkdir(parents=True, exist_ok=True)


__all__ = [
    "ROOT_DIR",
    "DATA_DIR",
    "DATA_PATH",
    "LOG_PATH",
    "LOG_LEVEL",
    "STEP_DURATION_MS",
    "FRAME_INTERVAL_MS",
    "RADIAL_SEGMENTS",
    "TREND_WINDOW",
    "GaugeConfig",
    "DashboardVariant",
    "DASHBOARD_VARIANTS",
    "DEFAULT_VARIANT",
    "get_variant",
    "ensure_required_paths",
]
