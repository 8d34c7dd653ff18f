"""Threshold policies turning a window cost into a changepoint decision."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Mapping


class ThresholdPolicy(ABC):
    """A cost above ``value()`` marks a changepoint."""

    name: str = "threshold"

    @abstractmethod
    def value(self) -> float:
        """Return the cost threshold."""

    def classify(self, cost: float) -> bool:
        return bool(cost > self.value())

    def describe(self) -> Mapping[str, Any]:
        return {"type": self.name, "value": self.value()}


class StaticThreshold(ThresholdPolicy):
    """Compares costs against a constant."""

    name = "static"

    def __init__(self, value: float) -> None:
        value = float(value)
        if math.isnan(value):
            raise ValueError("threshold value must be a number")
        self._value = value

    def value(self) -> float:
        return self._value


def estimate_threshold(probability: float, run_length: int, window_size: int, quantile_count: int) -> float:
    """Closed-form cost threshold for a false-alarm ``probability`` per ``run_length`` points.

    The bound accounts for every candidate split scanned in every window over
    the run. ``window_size`` and ``quantile_count`` must match the detector's.
    """

    if not 0.0 < probability <= 1.0:
        raise ValueError("probability must be greater than 0 and less than or equal to 1")
    if window_size <= 0:
        raise ValueError("window size must be greater than 0")
    if quantile_count <= 0:
        raise ValueError("quantile count must be greater than 0")
    if run_length < window_size - 1:
        raise ValueError("run length must be at least window size - 1")

    # a run exactly one window long still scans every split once
    splits = float(window_size) * max(float(run_length) - float(window_size) + 1.0, 1.0)
    estimate_b = 1.0 + 2.0 * math.sqrt(2.0 * math.log(splits / probability))
    if run_length + 1 == window_size:
        return estimate_b
    estimate_a = 1.0 - (8.0 / float(quantile_count)) * math.log(probability / splits)
    return max(estimate_a, estimate_b)


class EstimatedThreshold(ThresholdPolicy):
    """Threshold derived once from a target false-alarm probability.

    For example ``EstimatedThreshold(0.02, 1000, 300, 3)`` aims for a 2% chance
    of a false changepoint every 1000 datapoints with a 300-point window and
    three quantile probes.
    """

    name = "estimated"

    def __init__(self, probability: float, run_length: int, window_size: int, quantile_count: int) -> None:
        self.probability = float(probability)
        self.run_length = int(run_length)
        self.window_size = int(window_size)
        self.quantile_count = int(quantile_count)
        self._value = estimate_threshold(self.probability, self.run_length, self.window_size, self.quantile_count)

    def value(self) -> float:
        return self._value

    def describe(self) -> Mapping[str, Any]:
        return {
            **super().describe(),
            "probability": self.probability,
            "run_length": self.run_length,
            "window_size": self.window_size,
            "quantile_count": self.quantile_count,
        }
