"""Detector configuration loading and validation."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

ENV_PREFIX = "NUNC_"


class DetectorConfig(BaseModel):
    """Parameters shared by the CLI, streaming runner and HTTP service.

    ``threshold`` selects a static cost threshold. When it is omitted the
    threshold is estimated from ``probability`` (chance of a false changepoint)
    per ``run_length`` datapoints.
    """

    model_config = ConfigDict(extra="ignore")

    window_size: int = 300
    quantiles: int = 3
    threshold: Optional[float] = None
    probability: float = 0.02
    run_length: int = 1000

    @field_validator("window_size", "quantiles")
    @classmethod
    def _ensure_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than 0")
        return int(value)

    @field_validator("probability")
    @classmethod
    def _ensure_probability(cls, value: float) -> float:
        if not 0.0 < value <= 1.0:
            raise ValueError("probability must be greater than 0 and less than or equal to 1")
        return float(value)

    @model_validator(mode="after")
    def _check_consistency(self) -> "DetectorConfig":
        if self.quantiles >= self.window_size:
            raise ValueError("quantiles must be smaller than window_size")
        if self.threshold is None and self.run_length < self.window_size - 1:
            raise ValueError("run_length must be at least window_size - 1")
        return self

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def _read_mapping(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        loaded = json.loads(text)
    else:
        loaded = yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError("Config file must contain a mapping/object at the top level")
    return loaded


def load_config_mapping(path: str | Path) -> Dict[str, Any]:
    """Load a raw YAML or JSON configuration mapping."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return _read_mapping(path)


def _detector_section(cfg: Mapping[str, Any]) -> Mapping[str, Any]:
    section = cfg.get("detector")
    return section if isinstance(section, Mapping) else cfg


def config_from_env(base: Mapping[str, Any] | None = None, environ: Mapping[str, str] | None = None) -> DetectorConfig:
    """Build a config from ``base`` with ``NUNC_*`` environment overrides applied."""

    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = dict(base or {})
    for field in DetectorConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field.upper()}")
        if raw is not None and raw != "":
            values[field] = raw
    return DetectorConfig(**values)


def load_detector_config(path: str | Path | None = None, *, use_env: bool = True) -> DetectorConfig:
    """Resolve the detector config from an optional file plus the environment.

    A file may either hold the detector keys at the top level or nest them
    under a ``detector:`` section.
    """

    base: Mapping[str, Any] = {}
    if path:
        base = _detector_section(load_config_mapping(path))
    if use_env:
        return config_from_env(base)
    return DetectorConfig(**dict(base))
