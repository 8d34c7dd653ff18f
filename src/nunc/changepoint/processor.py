"""NUNC cost engine.

A full window is summarised by its empirical CDF evaluated at ``K`` quantile
probes. Every split of the window into a left and a right segment is scored
with a binomial log-likelihood ratio summed over the probes, and the split
with the largest score is reported as the candidate changepoint.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..streaming.buffering import SlidingWindow


@dataclass(frozen=True)
class Cost:
    """Strongest candidate changepoint found in one evaluation of a window.

    ``index`` is the absolute stream index of the first observation after the
    split, not the index of the observation that triggered the evaluation.
    """

    index: int
    value: float


def probe_probabilities(size: int, quantile_count: int) -> np.ndarray:
    """Probability points at which the window's distribution is probed."""

    if size <= 0:
        raise ValueError("size must be positive")
    if quantile_count <= 0:
        raise ValueError("quantile count must be greater than 0")
    c = math.log(2 * size - 1)
    i = np.arange(quantile_count, dtype=float)
    return 1.0 / (1.0 + (2.0 * size - 2.0) * np.exp((-c / quantile_count) * (2.0 * i - 1.0)))


def quantile(sorted_data: Sequence[float] | np.ndarray, pct: float) -> float:
    """Linearly interpolated quantile of already sorted data."""

    n = len(sorted_data)
    if n == 0:
        raise ValueError("cannot take a quantile of an empty sample")
    pct = min(max(float(pct), 0.0), 1.0)
    index = (n - 1) * pct
    lo = int(math.floor(index))
    hi = min(int(math.ceil(index)), n - 1)
    lower = float(sorted_data[lo])
    upper = float(sorted_data[hi])
    if lower == upper:
        return lower
    return lower + (index - lo) * (upper - lower)


def quantiles(sorted_data: Sequence[float] | np.ndarray, quantile_count: int) -> np.ndarray:
    probs = probe_probabilities(len(sorted_data), quantile_count)
    return np.array([quantile(sorted_data, p) for p in probs], dtype=float)


def ecdf(sorted_data: Sequence[float] | np.ndarray, value: float) -> float:
    """Mid-rank empirical CDF: values equal to ``value`` count as half."""

    arr = np.asarray(sorted_data, dtype=float)
    if arr.size == 0:
        raise ValueError("cannot evaluate the ECDF of an empty sample")
    left = int(np.searchsorted(arr, value, side="left"))
    right = int(np.searchsorted(arr, value, side="right"))
    return (left + (right - left) / 2.0) / arr.size


def indicator(datapoint: float, value: float) -> float:
    if datapoint < value:
        return 1.0
    if datapoint > value:
        return 0.0
    return 0.5


def cdf_cost(value: float, size: int) -> float:
    """Binomial log-likelihood of a CDF value over ``size`` points."""

    if value <= 0.0 or value >= 1.0:
        return 0.0
    conj = 1.0 - value
    return float(size) * (value * math.log(value) + conj * math.log(conj))


def _cdf_costs(values: np.ndarray, sizes: np.ndarray | float) -> np.ndarray:
    v = np.asarray(values, dtype=float)
    inside = (v > 0.0) & (v < 1.0)
    safe = np.where(inside, v, 0.5)
    terms = safe * np.log(safe) + (1.0 - safe) * np.log(1.0 - safe)
    return np.where(inside, np.asarray(sizes, dtype=float) * terms, 0.0)


def _indicators(data: np.ndarray, probes: np.ndarray) -> np.ndarray:
    x = data[:, None]
    return np.where(x < probes, 1.0, np.where(x > probes, 0.0, 0.5))


class CostEngine:
    """Computes the maximum segment cost of a full window."""

    def __init__(self, quantile_count: int) -> None:
        if quantile_count <= 0:
            raise ValueError("quantile count must be greater than 0")
        self.quantile_count = int(quantile_count)

    def segment_costs(self, data: Sequence[float] | np.ndarray) -> np.ndarray:
        """Return the segment cost of every split position of ``data``.

        Position ``i`` splits the window into ``data[: i + 1]`` and
        ``data[i + 1 :]``. The last position leaves the right segment empty
        and always scores 0.
        """

        x = np.asarray(data, dtype=float)
        n = x.size
        costs = np.zeros(n, dtype=float)
        if n < 2:
            return costs

        sorted_x = np.sort(x)
        probes = quantiles(sorted_x, self.quantile_count)
        full_cdf = np.array([ecdf(sorted_x, q) for q in probes], dtype=float)
        full_cost = float(np.sum(_cdf_costs(full_cdf, n)))

        # Removing x_i from the right segment is
        #   right = (right * len - indicator(x_i)) / (len - 1),
        # so after i + 1 removals right * len == full * n - sum(indicators).
        removed = np.cumsum(_indicators(x, probes), axis=0)[:-1]
        right_len = np.arange(n - 1, 0, -1, dtype=float)[:, None]
        left_len = n - right_len
        right_cdf = (full_cdf * n - removed) / right_len
        left_cdf = (full_cdf * n - right_cdf * right_len) / left_len

        left_cost = _cdf_costs(left_cdf, left_len).sum(axis=1)
        right_cost = _cdf_costs(right_cdf, right_len).sum(axis=1)
        costs[:-1] = 2.0 * (left_cost + right_cost - full_cost)
        return costs

    def evaluate(
        self,
        data: Sequence[float] | np.ndarray | None,
        total: int,
        capacity: int | None = None,
    ) -> Cost | None:
        """Locate the strongest split of a full window.

        ``total`` is the all-time number of observations pushed when ``data``
        was read. Returns ``None`` when the window is not full or when no
        split scores above zero.
        """

        if data is None:
            return None
        capacity = len(data) if capacity is None else int(capacity)
        if len(data) < capacity:
            return None

        costs = self.segment_costs(data)
        pos = int(np.argmax(costs))
        value = float(costs[pos])
        if not value > 0.0:
            return None
        return Cost(index=int(total) - capacity + pos + 1, value=value)

    def process(self, window: SlidingWindow[float], value: float) -> Cost | None:
        """Push ``value`` into ``window`` and evaluate the result."""

        total, data = window.push_snapshot(float(value), require_full=True)
        return self.evaluate(data, total, window.capacity())
