"""Nonparametric streaming changepoint detection with NUNC."""

from importlib import metadata

from .changepoint import (
    Cost,
    CostEngine,
    DetectionResult,
    Detector,
    EstimatedThreshold,
    StaticThreshold,
    ThresholdPolicy,
    estimate_threshold,
)
from .config import DetectorConfig, load_detector_config
from .models import ChangepointEvent
from .probe import RTTProbe, measure_rtt
from .signals import DEMO_SEGMENTS, generate_normal_segments, ingest_samples, segment_boundaries
from .streaming.buffering import SlidingWindow
from .streaming.service import StreamingService

try:
    __version__ = metadata.version("nunc")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.3.0"

__all__ = [
    "ChangepointEvent",
    "Cost",
    "CostEngine",
    "DEMO_SEGMENTS",
    "DetectionResult",
    "Detector",
    "DetectorConfig",
    "EstimatedThreshold",
    "RTTProbe",
    "SlidingWindow",
    "StaticThreshold",
    "StreamingService",
    "ThresholdPolicy",
    "estimate_threshold",
    "generate_normal_segments",
    "ingest_samples",
    "load_detector_config",
    "measure_rtt",
    "segment_boundaries",
    "__version__",
]
