"""Online changepoint detector built on the NUNC cost engine."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

from ..logging_utils import log_event
from ..streaming.buffering import SlidingWindow
from .processor import Cost, CostEngine
from .threshold import EstimatedThreshold, StaticThreshold, ThresholdPolicy

if TYPE_CHECKING:
    from ..config import DetectorConfig

logger = logging.getLogger(__name__)

DEFAULT_RUN_LENGTH = 1000


@dataclass
class DetectionResult:
    count: int
    cost: Cost | None
    is_changepoint: bool
    index: int | None = None
    threshold: float | None = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "cost": self.cost.value if self.cost else None,
            "cost_index": self.cost.index if self.cost else None,
            "is_changepoint": self.is_changepoint,
            "index": self.index,
            "threshold": self.threshold,
        }


class Detector:
    """Streams observations through a sliding window and reports changepoints.

    Each reported index is the absolute (0-based) stream index where the new
    distribution is estimated to start. An index is reported at most once,
    however many later windows point at it again.
    """

    def __init__(
        self,
        capacity: int,
        quantile_count: int,
        threshold: ThresholdPolicy | float | None = None,
        *,
        probability: float | None = None,
        run_length: int = DEFAULT_RUN_LENGTH,
    ) -> None:
        if quantile_count <= 0:
            raise ValueError("quantile count must be greater than 0")
        self.window: SlidingWindow[float] = SlidingWindow(capacity)
        if quantile_count >= capacity:
            raise ValueError("quantile count must be smaller than the window capacity")
        self.quantile_count = int(quantile_count)
        self.engine = CostEngine(self.quantile_count)

        if isinstance(threshold, ThresholdPolicy):
            self.threshold = threshold
        elif threshold is not None:
            self.threshold = StaticThreshold(threshold)
        elif probability is not None:
            self.threshold = EstimatedThreshold(probability, run_length, capacity, self.quantile_count)
        else:
            raise ValueError("a threshold value or a false-alarm probability is required")

        self._changepoints: list[int] = []
        self._reported: set[int] = set()

    @classmethod
    def from_config(cls, config: "DetectorConfig") -> "Detector":
        return cls(
            config.window_size,
            config.quantiles,
            config.threshold,
            probability=config.probability,
            run_length=config.run_length,
        )

    def step(self, value: float) -> DetectionResult:
        """Ingest one observation and return the full evaluation record."""

        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"observations must be finite (got {value})")

        total, data = self.window.push_snapshot(value, require_full=True)
        cost = self.engine.evaluate(data, total, self.window.capacity())
        result = DetectionResult(count=total, cost=cost, is_changepoint=False, threshold=self.threshold.value())
        if cost is None or not self.threshold.classify(cost.value):
            return result
        if cost.index in self._reported:
            return result

        self._reported.add(cost.index)
        self._changepoints.append(cost.index)
        result.is_changepoint = True
        result.index = cost.index
        log_event(logger, "changepoint", detector=self, index=cost.index, cost=round(cost.value, 3), count=total)
        return result

    def observe(self, value: float) -> int | None:
        """Return a newly detected changepoint index, or ``None``."""

        return self.step(value).index

    def observe_many(self, values: Iterable[float]) -> List[int]:
        found: list[int] = []
        for value in values:
            index = self.observe(value)
            if index is not None:
                found.append(index)
        return found

    def threshold_value(self) -> float:
        return self.threshold.value()

    def reported_changepoints(self) -> List[int]:
        return list(self._changepoints)

    def describe(self) -> Dict[str, Any]:
        return {
            "window_size": self.window.capacity(),
            "quantiles": self.quantile_count,
            "threshold": dict(self.threshold.describe()),
            "count": self.window.count(),
            "changepoints": self.reported_changepoints(),
        }
