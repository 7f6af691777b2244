import math

import pytest

from neurodash.engine.dataset import (
    Dataset,
    DatasetError,
    TrialSample,
    build_dataset,
    load_dataset,
    subject_min_max,
)


def test_load_groups_by_first_seen_subject_and_sorts_trials(csv_file):
    dataset = load_dataset(csv_file)
    assert [s.subject for s in dataset.subjects] == ["7", "2"]
    assert [t.trial_index for t in dataset[0].samples] == [1.0, 2.0, 3.0]
    assert [t.trial_index for t in dataset[1].samples] == [1.0, 2.0]
    assert dataset.row_count == 5
    assert dataset.source == str(csv_file)


def test_load_drops_rows_without_subject_or_trial(csv_file):
    dataset = load_dataset(csv_file)
    all_trials = [(t.subject, t.trial_index) for s in dataset.subjects for t in s.samples]
    assert ("2", 4.0) not in all_trials
    assert all(t.subject in {"7", "2"} for s in dataset.subjects for t in s.samples)


def test_load_keeps_unparseable_values_as_non_finite(csv_file):
    dataset = load_dataset(csv_file)
    missing_alpha = dataset[0][1]
    assert math.isnan(missing_alpha.alpha)
    assert math.isnan(missing_alpha.adr)
    assert math.isnan(dataset[1][1].aperiodic_slope)
    assert dataset.has_slope and dataset.has_bsi


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(DatasetError):
        load_dataset(tmp_path / "nope.csv")


def test_load_directory_raises_dataset_error(tmp_path):
    folder = tmp_path / "dir.csv"
    folder.mkdir()
    with pytest.raises(DatasetError, match="Could not read"):
        load_dataset(folder)


def test_load_missing_required_column_raises(tmp_path):
    path = tmp_path / "partial.csv"
    path.write_text("subject_number,trial_number,Alpha,Beta\n1,1,2,3\n", encoding="utf-8")
    with pytest.raises(DatasetError, match="Theta"):
        load_dataset(path)


def test_optional_columns_absent_are_nan(tmp_path):
    path = tmp_path / "basic.csv"
    path.write_text(
        "subject_number,trial_number,Alpha,Beta,Theta,Delta\n1,1,9,5,4,2\n1,2,8,5,5,3\n",
        encoding="utf-8",
    )
    dataset = load_dataset(path)
    assert not dataset.has_slope
    assert not dataset.has_bsi
    assert math.isnan(dataset[0][0].bsi)


def test_header_only_file_is_empty_dataset(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("subject_number,trial_number,Alpha,Beta,Theta,Delta\n", encoding="utf-8")
    dataset = load_dataset(path)
    assert not dataset.is_ready
    assert len(dataset) == 0


def test_build_dataset_stable_sort_keeps_duplicate_trial_order():
    rows = [
        {"subject_number": "x", "trial_number": 2, "Alpha": 1, "Beta": 1, "Theta": 1, "Delta": 1},
        {"subject_number": "x", "trial_number": 1, "Alpha": 5, "Beta": 1, "Theta": 1, "Delta": 1},
        {"subject_number": "x", "trial_number": 1, "Alpha": 6, "Beta": 1, "Theta": 1, "Delta": 1},
    ]
    dataset = build_dataset(rows)
    assert [t.alpha for t in dataset[0].samples] == [5.0, 6.0, 1.0]


def test_build_dataset_empty_rows():
    assert build_dataset([]) == Dataset.empty()


def test_trial_sample_ratios_use_denominator_floor():
    sample = TrialSample(subject="s", trial_index=1, alpha=2.0, beta=1.0, theta=3.0, delta=0.0)
    assert sample.adr == pytest.approx(20.0)
    assert sample.tar == pytest.approx(1.5)


def test_subject_min_max_regular_range():
    samples = [TrialSample("s", i, alpha=a, delta=1.0) for i, a in enumerate([2.0, 5.0, 3.0])]
    assert tuple(subject_min_max(samples, "alpha")) == (2.0, 5.0)


def test_subject_min_max_widens_degenerate_range():
    samples = [TrialSample("s", i, alpha=4.0) for i in range(3)]
    lo, hi = subject_min_max(samples, "alpha")
    eps = 4.0 - lo
    assert eps >= 0.001
    assert eps == pytest.approx(0.2)
    assert hi == pytest.approx(4.0 + eps)


def test_subject_min_max_widens_zero_by_minimum_eps():
    samples = [TrialSample("s", 1, bsi=0.0)]
    lo, hi = subject_min_max(samples, "bsi")
    assert lo == pytest.approx(-0.001)
    assert hi == pytest.approx(0.001)


def test_subject_min_max_without_finite_values_defaults_to_unit_range():
    samples = [TrialSample("s", 1)]
    assert tuple(subject_min_max(samples, "adr")) == (0.0, 1.0)
