"""Pytest configuration and shared fixtures.

Key fixtures:
- make_dataset: build a Dataset from compact (subject, trial, alpha, theta, delta) tuples
- three_trial_dataset: one subject with three trials
- two_subject_dataset: two subjects, two trials each
- csv_file: temporary CSV with shuffled trials, missing ids and a blank value
- engine: PlaybackEngine with a fake clock
"""

from __future__ import annotations

from pathlib import Path

import pytest

from neurodash.engine.dataset import Dataset, build_dataset
from neurodash.engine.playback import PlaybackEngine


def _rows(entries):
    rows = []
    for item in entries:
        subject, trial, alpha, theta, delta = item[:5]
        row = {
            "subject_number": subject,
            "trial_number": trial,
            "Alpha": alpha,
            "Beta": 5.0,
            "Theta": theta,
            "Delta": delta,
        }
        if len(item) > 5:
            row["Aperiodic_Slope"] = item[5]
        if len(item) > 6:
            row["BSI"] = item[6]
        rows.append(row)
    return rows


@pytest.fixture
def make_dataset():
    def _make(entries) -> Dataset:
        return build_dataset(_rows(entries))

    return _make


@pytest.fixture
def three_trial_dataset(make_dataset) -> Dataset:
    return make_dataset([("s1", 1, 2.0, 4.0, 1.0), ("s1", 2, 4.0, 6.0, 2.0), ("s1", 3, 6.0, 8.0, 3.0)])


@pytest.fixture
def two_subject_dataset(make_dataset) -> Dataset:
    return make_dataset(
        [
            ("b", 1, 8.0, 4.0, 2.0, -1.0, 0.05),
            ("b", 2, 7.0, 5.0, 3.0, -1.2, 0.15),
            ("a", 1, 3.0, 7.0, 6.0, -2.0, -0.4),
            ("a", 2, 2.5, 7.5, 6.5, -2.5, -0.5),
        ]
    )


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "features.csv"
    path.write_text(
        "subject_number,trial_number,Alpha,Beta,Theta,Delta,Aperiodic_Slope,BSI\n"
        "7,3,9.0,5.0,4.0,2.0,-1.3,0.02\n"
        "7,1,10.0,5.5,3.5,1.5,-1.1,0.01\n"
        "2,1,4.0,3.0,7.0,6.0,-2.4,-0.35\n"
        "7,2,,5.2,3.8,1.8,-1.2,0.015\n"
        ",4,1.0,1.0,1.0,1.0,0,0\n"
        "2,,1.0,1.0,1.0,1.0,0,0\n"
        "2,2,3.5,2.9,7.4,6.6,bad,-0.4\n",
        encoding="utf-8",
    )
    return path


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock) -> PlaybackEngine:
    return PlaybackEngine(step_ms=1200.0, trend_window=5, clock=clock)
