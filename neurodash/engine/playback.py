"""Deterministic, resumable playback over subject -> trial sequences.

The cursor is an immutable value; every tick and command returns a new one,
so transitions are testable without a live scheduler. ``PlaybackEngine`` owns
the live cursor for the dashboard and is driven by a host periodic trigger
(a Dash ``dcc.Interval``).
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from neurodash import config
from neurodash.engine.band_analysis import analyze, finite_or_zero
from neurodash.engine.dataset import Dataset, DatasetError, Range, load_dataset, subject_min_max
from neurodash.utils.logging_cfg import get_logger

log = get_logger(__name__)

RANGE_KEYS = ("adr", "tar", "aperiodic_slope", "bsi")


class PlaybackState(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class PlaybackCursor:
    subject_position: int = 0
    trial_position: int = 0
    fraction: float = 0.0
    state: PlaybackState = PlaybackState.PLAYING
    # None means no frame-timing reference yet.
    last_frame_ms: Optional[float] = None

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING


@dataclass(frozen=True)
class InterpolatedReading:
    subject: str
    trial: float
    alpha: float
    beta: float
    theta: float
    delta: float
    slope: Optional[float] = None
    bsi: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def initial_cursor() -> PlaybackCursor:
    return PlaybackCursor()


def _rewind(cursor: PlaybackCursor, subject_position: Optional[int] = None) -> PlaybackCursor:
    return PlaybackCursor(
        subject_position=cursor.subject_position if subject_position is None else subject_position,
        trial_position=0,
        fraction=0.0,
        state=PlaybackState.PLAYING,
        last_frame_ms=None,
    )


def advance(
    cursor: PlaybackCursor,
    dataset: Dataset,
    elapsed_ms: float,
    step_ms: float = config.STEP_DURATION_MS,
) -> PlaybackCursor:
    """Accumulate ``elapsed_ms`` and cross trial/subject boundaries at fraction 1."""
    if not dataset.is_ready or not cursor.is_playing:
        return cursor
    fraction = min(1.0, cursor.fraction + max(0.0, finite_or_zero(elapsed_ms)) / step_ms)
    if fraction < 1.0:
        return replace(cursor, fraction=fraction)

    series = dataset[cursor.subject_position]
    if cursor.trial_position < series.last_index:
        return replace(cursor, trial_position=cursor.trial_position + 1, fraction=0.0)
    if cursor.subject_position < dataset.last_index:
        return replace(
            cursor,
            subject_position=cursor.subject_position + 1,
            trial_position=0,
            fraction=0.0,
            last_frame_ms=None,
        )
    return replace(cursor, fraction=1.0, state=PlaybackState.FINISHED)


def on_frame(
    cursor: PlaybackCursor,
    dataset: Dataset,
    timestamp_ms: float,
    step_ms: float = config.STEP_DURATION_MS,
) -> PlaybackCursor:
    """Host frame callback: derive elapsed time from the frame reference, then advance."""
    if not dataset.is_ready or not cursor.is_playing:
        return cursor
    elapsed = 0.0 if cursor.last_frame_ms is None else timestamp_ms - cursor.last_frame_ms
    return advance(replace(cursor, last_frame_ms=timestamp_ms), dataset, elapsed, step_ms=step_ms)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _optional_lerp(a: float, b: float, t: float) -> Optional[float]:
    if not (math.isfinite(a) or math.isfinite(b)):
        return None
    return _lerp(finite_or_zero(a), finite_or_zero(b), t)


def sample(cursor: PlaybackCursor, dataset: Dataset) -> Optional[InterpolatedReading]:
    """Interpolated reading between the bracketing trials of the cursor."""
    if not dataset.is_ready:
        return None
    series = dataset[cursor.subject_position]
    a = series[cursor.trial_position]
    b = series[min(cursor.trial_position + 1, series.last_index)]
    t = cursor.fraction

    def lerp_field(name: str) -> float:
        return _lerp(finite_or_zero(getattr(a, name)), finite_or_zero(getattr(b, name)), t)

    return InterpolatedReading(
        subject=series.subject,
        trial=lerp_field("trial_index"),
        alpha=lerp_field("alpha"),
        beta=lerp_field("beta"),
        theta=lerp_field("theta"),
        delta=lerp_field("delta"),
        slope=_optional_lerp(a.aperiodic_slope, b.aperiodic_slope, t),
        bsi=_optional_lerp(a.bsi, b.bsi, t),
    )


def slope_history(cursor: PlaybackCursor, dataset: Dataset) -> List[float]:
    """Aperiodic slopes of the current subject up to and including the current trial."""
    if not dataset.is_ready:
        return []
    samples = dataset[cursor.subject_position].samples[: cursor.trial_position + 1]
    return [finite_or_zero(s.aperiodic_slope) for s in samples]


def toggle_play(cursor: PlaybackCursor, dataset: Dataset) -> PlaybackCursor:
    if not dataset.is_ready:
        return cursor
    state = PlaybackState.PAUSED if cursor.is_playing else PlaybackState.PLAYING
    return replace(cursor, state=state, last_frame_ms=None)


def reset(cursor: PlaybackCursor, dataset: Dataset) -> PlaybackCursor:
    if not dataset.is_ready:
        return cursor
    return _rewind(cursor)


def next_subject(cursor: PlaybackCursor, dataset: Dataset) -> PlaybackCursor:
    if not dataset.is_ready:
        return cursor
    return _rewind(cursor, (cursor.subject_position + 1) % len(dataset))


def prev_subject(cursor: PlaybackCursor, dataset: Dataset) -> PlaybackCursor:
    if not dataset.is_ready:
        return cursor
    return _rewind(cursor, (cursor.subject_position - 1 + len(dataset)) % len(dataset))


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class PlaybackEngine:
    """Own the dataset and live cursor; advance on host frames and user commands."""

    def __init__(
        self,
        step_ms: float = config.STEP_DURATION_MS,
        trend_window: int = config.TREND_WINDOW,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._step_ms = step_ms
        self._trend_window = trend_window
        self._clock = clock or _monotonic_ms
        self._dataset = Dataset.empty()
        self._cursor = initial_cursor()
        self._lock = threading.Lock()
        self._attached = False
        self._loading = False
        self._last_error: Optional[str] = None
        self._load_thread: Optional[threading.Thread] = None
        self._range_cache: Dict[int, Dict[str, Range]] = {}
        self._has_slope = False
        self._has_bsi = False

    # Loading
    def load(self, dataset: Dataset) -> None:
        """Replace the dataset wholesale and reset the cursor."""
        has_slope, has_bsi = dataset.has_slope, dataset.has_bsi
        with self._lock:
            self._dataset = dataset
            self._cursor = initial_cursor()
            self._range_cache = {}
            self._has_slope = has_slope
            self._has_bsi = has_bsi
            self._last_error = None
        if not dataset.is_ready:
            log.warning("Dataset %s has no subjects; playback not started", dataset.source or "<memory>")

    def load_path(self, path: Union[str, Path]) -> bool:
        """Load a CSV synchronously; failures are recorded, not raised."""
        with self._lock:
            self._loading = True
        try:
            dataset = load_dataset(path)
        except DatasetError as exc:
            log.error("Dataset load failed: %s", exc)
            with self._lock:
                self._last_error = str(exc)
            return False
        else:
            self.load(dataset)
            return True
        finally:
            with self._lock:
                self._loading = False

    def load_async(self, path: Union[str, Path]) -> threading.Thread:
        """Fetch-then-replace on a daemon thread; the old dataset stays live until done."""
        with self._lock:
            self._loading = True
        thread = threading.Thread(target=self.load_path, args=(path,), daemon=True)
        self._load_thread = thread
        thread.start()
        return thread

    # Scheduler registration
    def attach(self) -> None:
        with self._lock:
            if self._attached:
                return
            self._attached = True
            self._cursor = replace(self._cursor, last_frame_ms=None)
        log.debug("Playback attached to frame trigger")

    def detach(self) -> None:
        with self._lock:
            if not self._attached:
                return
            self._attached = False
        log.debug("Playback detached from frame trigger")

    def is_attached(self) -> bool:
        with self._lock:
            return self._attached

    def on_frame(self, timestamp_ms: Optional[float] = None) -> PlaybackCursor:
        """Advance the live cursor for one host frame; ignored while detached."""
        ts = self._clock() if timestamp_ms is None else timestamp_ms
        with self._lock:
            if not self._attached:
                return self._cursor
            before = self._cursor
            self._cursor = on_frame(before, self._dataset, ts, step_ms=self._step_ms)
            after = self._cursor
            dataset = self._dataset
        if after.subject_position != before.subject_position:
            log.info("Advanced to subject %s", dataset[after.subject_position].subject)
        elif after.state is PlaybackState.FINISHED and before.state is not PlaybackState.FINISHED:
            log.info("Playback finished at subject %s", dataset[after.subject_position].subject)
        return after

    # Commands
    def _apply(self, command: Callable[[PlaybackCursor, Dataset], PlaybackCursor]) -> PlaybackCursor:
        with self._lock:
            self._cursor = command(self._cursor, self._dataset)
            return self._cursor

    def toggle_play(self) -> PlaybackCursor:
        return self._apply(toggle_play)

    def reset(self) -> PlaybackCursor:
        return self._apply(reset)

    def next_subject(self) -> PlaybackCursor:
        return self._apply(next_subject)

    def prev_subject(self) -> PlaybackCursor:
        return self._apply(prev_subject)

    # Read side
    def get_cursor(self) -> PlaybackCursor:
        with self._lock:
            return self._cursor

    def _status_label(self) -> str:
        if self._dataset.is_ready:
            return "ready"
        if self._loading:
            return "loading"
        if self._last_error:
            return "error"
        return "not_ready"

    def get_status(self) -> Dict[str, object]:
        with self._lock:
            return {
                "status": self._status_label(),
                "attached": self._attached,
                "loading": self._loading,
                "last_error": self._last_error,
                "source": self._dataset.source,
                "subject_count": len(self._dataset),
                "row_count": self._dataset.row_count,
                "state": self._cursor.state.value,
            }

    def _ranges_for(self, subject_position: int) -> Dict[str, Range]:
        cached = self._range_cache.get(subject_position)
        if cached is None:
            samples = self._dataset[subject_position].samples
            cached = {key: subject_min_max(samples, key) for key in RANGE_KEYS}
            self._range_cache[subject_position] = cached
        return cached

    def snapshot(self) -> Dict[str, object]:
        """Everything the renderer needs for the current frame."""
        with self._lock:
            dataset = self._dataset
            cursor = self._cursor
            status = self._status_label()
            last_error = self._last_error
            ranges = self._ranges_for(cursor.subject_position) if dataset.is_ready else {}
            has_slope, has_bsi = self._has_slope, self._has_bsi
        out: Dict[str, object] = {"status": status, "last_error": last_error, "state": cursor.state.value}
        reading = sample(cursor, dataset)
        if reading is None:
            return out
        # A BSI column with gaps reads as symmetric rather than absent.
        if has_bsi and reading.bsi is None:
            reading = replace(reading, bsi=0.0)

        series = dataset[cursor.subject_position]
        history = slope_history(cursor, dataset) if has_slope else None
        analysis = analyze(
            reading.to_dict(),
            slope_history=history,
            current_index=cursor.trial_position,
            window_size=self._trend_window,
        )
        out.update(
            {
                "subject": series.subject,
                "subject_position": cursor.subject_position,
                "subject_count": len(dataset),
                "trial_position": cursor.trial_position,
                "trial_count": len(series),
                "fraction": cursor.fraction,
                "time": reading.trial,
                "reading": reading.to_dict(),
                "analysis": analysis.to_dict(),
                "ranges": {k: tuple(v) for k, v in ranges.items()},
                "slope_history": history or [],
                "trial_history": [s.trial_index for s in series.samples[: cursor.trial_position + 1]],
            }
        )
        return out


__all__ = [
    "PlaybackState",
    "PlaybackCursor",
    "InterpolatedReading",
    "PlaybackEngine",
    "initial_cursor",
    "advance",
    "on_frame",
    "sample",
    "slope_history",
    "toggle_play",
    "reset",
    "next_subject",
    "prev_subject",
]
