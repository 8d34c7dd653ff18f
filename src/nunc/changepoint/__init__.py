from .detector import DetectionResult, Detector
from .processor import Cost, CostEngine, cdf_cost, ecdf, indicator, probe_probabilities, quantile, quantiles
from .threshold import EstimatedThreshold, StaticThreshold, ThresholdPolicy, estimate_threshold

__all__ = [
    "Cost",
    "CostEngine",
    "DetectionResult",
    "Detector",
    "EstimatedThreshold",
    "StaticThreshold",
    "ThresholdPolicy",
    "cdf_cost",
    "ecdf",
    "estimate_threshold",
    "indicator",
    "probe_probabilities",
    "quantile",
    "quantiles",
]
