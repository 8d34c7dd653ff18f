from .buffering import ReadWriteLock, SlidingWindow
from .sources import CSVTailSource, ProbeSource, SamplesSource, SimulatedSource, build_source

__all__ = [
    "ReadWriteLock",
    "SlidingWindow",
    "CSVTailSource",
    "ProbeSource",
    "SamplesSource",
    "SimulatedSource",
    "build_source",
]
