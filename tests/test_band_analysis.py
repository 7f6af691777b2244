import math

import pytest

from neurodash.engine import band_analysis as ba
from neurodash.engine.band_analysis import SymmetryClass, TrendAlert


def test_severity_all_zero_is_alpha_low_baseline():
    # alpha_low = 1, ratio terms 0, no suppression bonus (0 < 0 is false).
    assert ba.compute_severity(0, 0, 0) == pytest.approx(0.15 * 1.4)


def test_severity_non_finite_inputs_score_as_zero():
    expected = ba.compute_severity(0, 0, 0)
    assert ba.compute_severity(float("nan"), None, float("inf")) == pytest.approx(expected)
    assert ba.compute_severity("n/a", "", float("-inf")) == pytest.approx(expected)


def test_severity_at_thresholds_uses_ratio_terms_only():
    tar_norm = (5.5 / 9 - 0.4) / 1.2
    dar_norm = (3.5 / 9 - 0.2) / 1.0
    expected = 1.4 * (0.15 * tar_norm + 0.10 * dar_norm)
    assert ba.compute_severity(9.0, 5.5, 3.5) == pytest.approx(expected)


def test_severity_suppression_bonus_applies_when_alpha_below_both():
    without = ba.compute_severity(4.0, 3.9, 5.0)
    with_bonus = ba.compute_severity(4.0, 4.1, 5.0)
    assert with_bonus - without > 0.2 * 1.4 - 0.05


def test_severity_saturates_at_one():
    assert ba.compute_severity(1.0, 11.0, 7.0) == 1.0


def test_severity_is_deterministic_and_bounded():
    values = [0.0, 0.05, 0.5, 2.0, 4.5, 9.0, 15.0, 40.0]
    for alpha in values:
        for theta in values:
            for delta in values:
                first = ba.compute_severity(alpha, theta, delta)
                assert first == ba.compute_severity(alpha, theta, delta)
                assert 0.0 <= first <= 1.0


@pytest.mark.parametrize("theta,delta", [(0.0, 0.0), (4.0, 2.0), (6.0, 4.0), (10.0, 8.0)])
def test_severity_never_decreases_as_alpha_drops(theta, delta):
    alphas = [9.0 - 0.25 * k for k in range(37)]
    scores = [ba.compute_severity(a, theta, delta) for a in alphas]
    for prev, cur in zip(scores, scores[1:]):
        assert cur >= prev - 1e-12


def test_visual_intensity_regain():
    assert ba.severity_to_visual_intensity(0.0) == 0.0
    assert ba.severity_to_visual_intensity(1.0) == 1.0
    assert ba.severity_to_visual_intensity(0.5) == pytest.approx(0.5 ** 0.7 * 1.1)
    assert ba.severity_to_visual_intensity(0.5) > 0.5


def test_ratio_floor_applies_below_threshold():
    assert ba.compute_ratio(3.0, 0) == ba.compute_ratio(3.0, 0.05) == pytest.approx(3.0 / 0.1)
    assert ba.compute_ratio(5.0, 2.0) == pytest.approx(2.5)
    # Floor guards the denominator only; output is unbounded.
    assert ba.compute_ratio(100.0, 0.0) == pytest.approx(1000.0)
    assert ba.compute_ratio(3.0, float("nan")) == pytest.approx(30.0)
    assert ba.compute_ratio(float("nan"), 1.0) == 0.0
    assert ba.compute_ratio(float("inf"), None) == 0.0


def test_classify_by_range_three_buckets():
    rng = (0.0, 3.0)
    assert ba.classify_by_range(0.5, rng) == "GREEN"
    assert ba.classify_by_range(1.5, rng) == "YELLOW"
    assert ba.classify_by_range(2.5, rng) == "RED"
    assert ba.classify_by_range(99.0, rng) == "RED"


def test_classify_by_range_inverted_metric():
    rng = (0.0, 3.0)
    assert ba.classify_by_range(0.2, rng, invert=True) == "RED"
    assert ba.classify_by_range(2.8, rng, invert=True) == "GREEN"


def test_classify_by_range_two_buckets_and_gamma():
    rng = (0.0, 1.0)
    assert ba.classify_by_range(0.5, rng, buckets=2) == "GOOD"
    assert ba.classify_by_range(0.51, rng, buckets=2) == "BAD"
    assert ba.classify_by_range(0.3, rng, buckets=2) == "GOOD"
    # Gamma < 1 exaggerates needle travel toward the bad end.
    assert ba.classify_by_range(0.3, rng, buckets=2, gamma=0.55) == "BAD"


def test_classify_by_range_degenerate_range_does_not_divide_by_zero():
    assert ba.gauge_position(2.0, (2.0, 2.0)) == 0.0
    assert ba.classify_by_range(2.0, (2.0, 2.0)) == "GREEN"


def test_classify_by_range_rejects_unknown_bucket_count():
    with pytest.raises(ValueError):
        ba.classify_by_range(1.0, (0.0, 2.0), buckets=4)


def test_trend_alert_flat_history_is_normal():
    assert ba.classify_trend_alert([-1.5] * 6, 5) is TrendAlert.NORMAL


def test_trend_alert_large_jump_is_high():
    assert ba.classify_trend_alert([0.0, 0.0, 0.0, 0.0, 2.0], 4) is TrendAlert.HIGH


def test_trend_alert_moderate_change():
    # |1.0 - 0.0| / 6 samples
    assert ba.classify_trend_alert([0.0, 0.0, 0.0, 0.0, 0.0, 1.0], 5) is TrendAlert.MEDIUM


def test_trend_alert_single_sample_is_normal():
    assert ba.classify_trend_alert([3.0], 0) is TrendAlert.NORMAL
    assert ba.classify_trend_alert([], 0) is TrendAlert.NORMAL


def test_trend_alert_uses_trailing_window_only():
    history = [5.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0]
    assert ba.classify_trend_alert(history, 6, window_size=5) is TrendAlert.NORMAL
    assert ba.classify_trend_alert(history, 5, window_size=5) is TrendAlert.HIGH


def test_trend_alert_ignores_samples_after_current_index():
    assert ba.classify_trend_alert([0.0, 0.0, 9.0], 1) is TrendAlert.NORMAL


@pytest.mark.parametrize(
    "bsi,expected",
    [
        (0.0, SymmetryClass.SYMMETRIC),
        (-0.099, SymmetryClass.SYMMETRIC),
        (0.1, SymmetryClass.MILD),
        (-0.25, SymmetryClass.MILD),
        (0.3, SymmetryClass.SIGNIFICANT),
        (-0.8, SymmetryClass.SIGNIFICANT),
        (float("nan"), SymmetryClass.SYMMETRIC),
    ],
)
def test_classify_symmetry(bsi, expected):
    assert ba.classify_symmetry(bsi) is expected


def test_affected_hemisphere_follows_sign():
    assert ba.affected_hemisphere(-0.2) == "left"
    assert ba.affected_hemisphere(0.2) == "right"
    assert ba.affected_hemisphere(0.0) is None


def test_analyze_minimal_reading():
    result = ba.analyze({"alpha": 8.0, "beta": 5.0, "theta": 4.0, "delta": 2.0})
    assert result.severity == pytest.approx(ba.compute_severity(8.0, 4.0, 2.0))
    assert result.ratios == {"adr": pytest.approx(4.0), "tar": pytest.approx(0.5)}
    assert result.trend_alert is None
    assert result.symmetry_class is None
    assert result.hemisphere is None


def test_analyze_extended_reading():
    result = ba.analyze(
        {"alpha": 3.0, "theta": 7.0, "delta": 6.0, "bsi": -0.45},
        slope_history=[-1.0, -1.0, -1.0, -3.0],
        current_index=3,
    )
    assert result.trend_alert is TrendAlert.HIGH
    assert result.symmetry_class is SymmetryClass.SIGNIFICANT
    assert result.hemisphere == "left"
    payload = result.to_dict()
    assert payload["ratios"]["tar"] == pytest.approx(7.0 / 3.0)
    assert not math.isnan(payload["visual_intensity"])
