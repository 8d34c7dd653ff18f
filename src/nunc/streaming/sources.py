"""Streaming source adapters yielding batches of observations."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Mapping, Sequence

from ..probe import RTTProbe
from ..signals import generate_normal_segments

logger = logging.getLogger(__name__)


class StreamingSource:
    """Iterable source contract."""

    def __iter__(self) -> Iterator[Sequence[float]]:  # pragma: no cover - interface only
        raise NotImplementedError


def _batched(values: Iterable[float], batch_size: int) -> Iterator[List[float]]:
    batch: list[float] = []
    for value in values:
        batch.append(float(value))
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


class SamplesSource(StreamingSource):
    """Replays an in-memory sequence in fixed-size batches."""

    def __init__(self, samples: Sequence[float], batch_size: int = 128) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.samples = list(samples)
        self.batch_size = batch_size

    def __iter__(self) -> Iterator[Sequence[float]]:
        return _batched(self.samples, self.batch_size)


class SimulatedSource(SamplesSource):
    """Normally distributed segments, one distribution change per boundary."""

    def __init__(
        self,
        segments: Sequence[Mapping[str, float]] | None = None,
        batch_size: int = 128,
        seed: int | None = None,
    ) -> None:
        super().__init__(generate_normal_segments(segments, seed=seed), batch_size=batch_size)


class CSVTailSource(StreamingSource):
    """Tails a CSV file and yields numeric batches from its first column."""

    def __init__(
        self,
        path: str | Path,
        batch_size: int = 128,
        poll_interval: float = 0.5,
        follow: bool = True,
    ) -> None:
        self.path = Path(path)
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.follow = follow

    def __iter__(self) -> Iterator[Sequence[float]]:
        if not self.path.exists():
            raise FileNotFoundError(self.path)
        with self.path.open("r", encoding="utf-8") as handle:
            buffer: list[float] = []
            while True:
                pos = handle.tell()
                line = handle.readline()
                if not line:
                    if not self.follow:
                        break
                    time.sleep(self.poll_interval)
                    handle.seek(pos)
                    continue
                try:
                    buffer.append(float(line.split(",")[0]))
                except ValueError:
                    # header or malformed row
                    continue
                if len(buffer) >= self.batch_size:
                    yield buffer[: self.batch_size]
                    buffer = buffer[self.batch_size :]
            if buffer:
                yield buffer


class ProbeSource(StreamingSource):
    """Feeds round-trip times (seconds) to a target, one sample per batch."""

    def __init__(self, probe: RTTProbe) -> None:
        self.probe = probe

    def __iter__(self) -> Iterator[Sequence[float]]:
        for rtt in self.probe:
            yield [rtt]


def build_source(cfg: Mapping[str, object] | None) -> Callable[[], Iterable[Sequence[float]]]:
    """Factory for streaming sources based on config mapping."""

    if cfg is None:
        return lambda: SimulatedSource()

    if callable(cfg):
        return cfg  # type: ignore[return-value]

    source_type = str(cfg.get("type", "simulated")).lower()
    batch_size = int(cfg.get("batch_size", 128))  # type: ignore[arg-type]
    if source_type in {"simulated", "demo"}:
        segments = cfg.get("segments")
        seed = cfg.get("seed")
        return lambda: SimulatedSource(
            segments=segments,  # type: ignore[arg-type]
            batch_size=batch_size,
            seed=int(seed) if seed is not None else None,  # type: ignore[arg-type]
        )
    if source_type == "samples":
        samples = cfg.get("samples")
        if not isinstance(samples, Sequence):
            raise ValueError("Samples source requires a 'samples' list")
        return lambda: SamplesSource(samples, batch_size=batch_size)  # type: ignore[arg-type]
    if source_type in {"csv", "tail"}:
        path = cfg.get("path")
        if not path:
            raise ValueError("CSV source requires 'path'")
        poll_interval = float(cfg.get("poll_interval", 0.5))  # type: ignore[arg-type]
        follow = bool(cfg.get("follow", True))
        return lambda: CSVTailSource(str(path), batch_size=batch_size, poll_interval=poll_interval, follow=follow)
    if source_type in {"probe", "ping"}:
        host = cfg.get("host")
        if not host:
            raise ValueError("Probe source requires 'host'")
        probe_kwargs = {
            "port": int(cfg.get("port", 80)),  # type: ignore[arg-type]
            "count": int(cfg.get("count", 0)),  # type: ignore[arg-type]
            "interval": float(cfg.get("interval", 1.0)),  # type: ignore[arg-type]
            "timeout": float(cfg.get("timeout", 1.0)),  # type: ignore[arg-type]
            "mode": str(cfg.get("mode", "icmp")).lower(),
        }
        return lambda: ProbeSource(RTTProbe(str(host), **probe_kwargs))

    raise ValueError(f"Unknown streaming source type '{source_type}'")
