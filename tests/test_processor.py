from __future__ import annotations

import numpy as np
import pytest

from nunc.changepoint.processor import (
    CostEngine,
    cdf_cost,
    ecdf,
    indicator,
    probe_probabilities,
    quantile,
)
from nunc.streaming.buffering import SlidingWindow


def test_quantile_bounds_and_monotonicity() -> None:
    data = sorted(np.random.default_rng(3).normal(size=57).tolist())
    assert quantile(data, 0.0) == data[0]
    assert quantile(data, 1.0) == data[-1]

    values = [quantile(data, p) for p in np.linspace(0.0, 1.0, 101)]
    assert all(b >= a for a, b in zip(values, values[1:]))
    assert values == [quantile(data, p) for p in np.linspace(0.0, 1.0, 101)]


def test_quantile_interpolates_between_ranks() -> None:
    assert quantile([0.0, 10.0], 0.25) == pytest.approx(2.5)
    assert quantile([1.0, 2.0, 3.0], 0.5) == 2.0
    assert quantile([4.0, 4.0, 4.0], 0.7) == 4.0


def test_quantile_rejects_empty_data() -> None:
    with pytest.raises(ValueError):
        quantile([], 0.5)


def test_probe_probabilities_are_increasing_probabilities() -> None:
    probs = probe_probabilities(300, 5)
    assert probs.shape == (5,)
    assert np.all((probs > 0.0) & (probs < 1.0))
    assert np.all(np.diff(probs) > 0)


@pytest.mark.parametrize("v", [0.01, 0.2, 0.37, 0.5, 0.9])
@pytest.mark.parametrize("n", [1, 10, 300])
def test_cdf_cost_is_symmetric(v: float, n: int) -> None:
    assert cdf_cost(v, n) == pytest.approx(cdf_cost(1.0 - v, n))
    assert cdf_cost(v, n) < 0.0


@pytest.mark.parametrize("v", [-0.5, 0.0, 1.0, 1.5])
def test_cdf_cost_is_zero_outside_open_interval(v: float) -> None:
    for n in (0, 1, 50):
        assert cdf_cost(v, n) == 0.0


def test_ecdf_uses_mid_ranks_for_ties() -> None:
    data = [1.0, 2.0, 2.0, 3.0]
    assert ecdf(data, 2.0) == pytest.approx(0.5)
    assert ecdf(data, 0.0) == 0.0
    assert ecdf(data, 5.0) == 1.0
    assert ecdf(data, 1.0) == pytest.approx(0.125)


def test_indicator_counts_equal_values_as_half() -> None:
    assert indicator(1.0, 2.0) == 1.0
    assert indicator(3.0, 2.0) == 0.0
    assert indicator(2.0, 2.0) == 0.5


def test_engine_rejects_non_positive_quantiles() -> None:
    with pytest.raises(ValueError):
        CostEngine(0)


def test_evaluate_returns_none_until_window_full() -> None:
    engine = CostEngine(3)
    assert engine.evaluate(None, 5, 10) is None
    assert engine.evaluate([0.0, 1.0, 2.0], 3, 10) is None


def test_constant_window_has_no_changepoint() -> None:
    cost = CostEngine(3).evaluate([0.0] * 50, 50, 50)
    assert cost is None or cost.value < 1e-9


def test_step_change_located_at_first_new_point() -> None:
    engine = CostEngine(3)
    data = [0.0] * 20 + [10.0] * 20

    cost = engine.evaluate(data, 40, 40)
    assert cost is not None
    assert cost.index == 20
    assert cost.value > 50.0

    shifted = engine.evaluate(data, 140, 40)
    assert shifted is not None
    assert shifted.index == 120
    assert shifted.value == pytest.approx(cost.value)


def test_segment_costs_cover_every_split() -> None:
    data = np.random.default_rng(7).normal(size=60)
    costs = CostEngine(4).segment_costs(data)
    assert costs.shape == (60,)
    assert costs[-1] == 0.0
    assert np.all(np.isfinite(costs))


def test_segment_cost_peaks_at_distribution_change() -> None:
    rng = np.random.default_rng(11)
    data = np.concatenate([rng.normal(0.0, 1.0, 80), rng.normal(0.0, 8.0, 80)])
    costs = CostEngine(5).segment_costs(data)
    assert abs(int(np.argmax(costs)) + 1 - 80) <= 12


def test_process_pushes_into_window() -> None:
    window: SlidingWindow[float] = SlidingWindow(4)
    engine = CostEngine(2)
    assert engine.process(window, 0.0) is None
    assert window.count() == 1
    for value in [0.0, 5.0]:
        engine.process(window, value)
    cost = engine.process(window, 5.0)
    assert cost is not None
    assert cost.index == 2
