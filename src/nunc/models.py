"""Changepoint representations for downstream reporting."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .changepoint.detector import DetectionResult


class ChangepointEvent(BaseModel):
    """A reported changepoint with the evaluation that produced it."""

    model_config = ConfigDict(extra="allow")

    index: int
    detected_at: int
    cost: float
    threshold: float
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_result(cls, result: DetectionResult) -> "ChangepointEvent":
        if not result.is_changepoint or result.cost is None or result.index is None:
            raise ValueError("detection result is not a changepoint")
        return cls(
            index=result.index,
            detected_at=result.count - 1,
            cost=result.cost.value,
            threshold=float(result.threshold or 0.0),
        )

    def short_label(self) -> str:
        return f"changepoint@{self.index}"
