"""Streaming runner feeding a source into a changepoint detector."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Mapping, Sequence

from ..changepoint.detector import Detector
from ..config import DetectorConfig
from ..logging_utils import log_event
from ..models import ChangepointEvent
from .sources import build_source

logger = logging.getLogger(__name__)


class StreamingService:
    """Pulls batches from a source and reports changepoints as they appear."""

    def __init__(
        self,
        source: Callable[[], Iterable[Sequence[float]]],
        detector: Detector,
        *,
        interval_ms: int = 0,
        on_changepoint: Callable[[ChangepointEvent], None] | None = None,
    ) -> None:
        self.source = source
        self.detector = detector
        self.interval_ms = interval_ms
        self.on_changepoint = on_changepoint
        self.processed = 0
        self._running = False

    @classmethod
    def create_from_config(
        cls,
        cfg: Mapping[str, object],
        *,
        on_changepoint: Callable[[ChangepointEvent], None] | None = None,
    ) -> "StreamingService":
        detector_cfg = cfg.get("detector", {})
        config = DetectorConfig(**dict(detector_cfg))  # type: ignore[arg-type]
        streaming_cfg = cfg.get("streaming", {})
        interval_ms = int(streaming_cfg.get("interval_ms", 0))  # type: ignore[union-attr]
        return cls(
            source=build_source(cfg.get("source")),  # type: ignore[arg-type]
            detector=Detector.from_config(config),
            interval_ms=interval_ms,
            on_changepoint=on_changepoint,
        )

    def process_samples(self, samples: Sequence[float]) -> List[ChangepointEvent]:
        events: list[ChangepointEvent] = []
        for value in samples:
            result = self.detector.step(value)
            self.processed += 1
            if not result.is_changepoint:
                continue
            event = ChangepointEvent.from_result(result)
            events.append(event)
            if self.on_changepoint:
                self.on_changepoint(event)
        return events

    def run(self, *, max_batches: int | None = None, duration_s: float | None = None) -> List[ChangepointEvent]:
        """Run the streaming loop until the source ends or a limit is reached."""

        self._running = True
        events: list[ChangepointEvent] = []
        start = time.monotonic()
        for idx, samples in enumerate(self.source()):
            if not self._running:
                break
            loop_start = time.monotonic()
            events.extend(self.process_samples(samples))
            if max_batches is not None and idx + 1 >= max_batches:
                break
            if duration_s is not None and (time.monotonic() - start) >= duration_s:
                break
            elapsed_ms = (time.monotonic() - loop_start) * 1000.0
            if elapsed_ms < self.interval_ms:
                time.sleep((self.interval_ms - elapsed_ms) / 1000.0)
        self._running = False
        log_event(logger, "stream_stopped", detector=self.detector, processed=self.processed, changepoints=len(events))
        return events

    def stop(self) -> None:
        self._running = False
