from __future__ import annotations

import math

import pytest

from nunc.changepoint.threshold import EstimatedThreshold, StaticThreshold, estimate_threshold


def test_static_threshold_is_strict() -> None:
    threshold = StaticThreshold(5.0)
    assert threshold.value() == 5.0
    assert threshold.classify(5.1)
    assert not threshold.classify(5.0)
    assert not threshold.classify(-1.0)
    assert threshold.describe() == {"type": "static", "value": 5.0}


def test_static_threshold_rejects_nan() -> None:
    with pytest.raises(ValueError):
        StaticThreshold(float("nan"))


def test_estimated_threshold_is_reproducible() -> None:
    first = EstimatedThreshold(0.02, 1000, 300, 3)
    second = EstimatedThreshold(0.02, 1000, 300, 3)
    assert first.value() == second.value()
    assert first.value() == estimate_threshold(0.02, 1000, 300, 3)

    splits = 300 * (1000 - 300 + 1)
    estimate_a = 1.0 - (8.0 / 3.0) * math.log(0.02 / splits)
    estimate_b = 1.0 + 2.0 * math.sqrt(2.0 * math.log(splits / 0.02))
    assert first.value() == pytest.approx(max(estimate_a, estimate_b))
    assert first.value() == pytest.approx(estimate_a)


def test_estimated_threshold_prefers_larger_bound() -> None:
    value = estimate_threshold(0.05, 1000, 100, 200)
    splits = 100 * 901
    assert value == pytest.approx(1.0 + 2.0 * math.sqrt(2.0 * math.log(splits / 0.05)))


def test_estimated_threshold_single_window_run() -> None:
    value = estimate_threshold(0.05, 99, 100, 3)
    assert math.isfinite(value)
    assert value == pytest.approx(1.0 + 2.0 * math.sqrt(2.0 * math.log(100 / 0.05)))


def test_estimated_threshold_classifies_against_value() -> None:
    threshold = EstimatedThreshold(0.02, 1000, 300, 3)
    assert threshold.classify(threshold.value() + 1e-6)
    assert not threshold.classify(threshold.value())
    described = threshold.describe()
    assert described["type"] == "estimated"
    assert described["probability"] == 0.02
    assert described["window_size"] == 300


@pytest.mark.parametrize("probability", [0.0, -0.1, 1.5, float("nan")])
def test_estimated_threshold_rejects_bad_probability(probability: float) -> None:
    with pytest.raises(ValueError):
        EstimatedThreshold(probability, 1000, 300, 3)


def test_estimated_threshold_accepts_certain_probability() -> None:
    assert EstimatedThreshold(1.0, 1000, 300, 3).value() > 1.0


@pytest.mark.parametrize(
    "run_length,window_size,quantiles",
    [(1000, 0, 3), (1000, -5, 3), (1000, 300, 0), (100, 300, 3)],
)
def test_estimated_threshold_rejects_bad_shape(run_length: int, window_size: int, quantiles: int) -> None:
    with pytest.raises(ValueError):
        estimate_threshold(0.02, run_length, window_size, quantiles)
