"""Synthetic data generation and sample ingestion helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Sequence

import numpy as np
import pandas as pd

# Changes in distribution at 700, 1300, 2000 and 2400.
DEMO_SEGMENTS: List[Mapping[str, float]] = [
    {"mean": 0.0, "std": 1.0, "size": 700},
    {"mean": 20.0, "std": 0.5, "size": 600},
    {"mean": 5.0, "std": 4.0, "size": 700},
    {"mean": 6000.0, "std": 95.0, "size": 400},
    {"mean": 6000.0, "std": 95.0, "size": 5000},
]


def generate_normal_segments(
    segments: Sequence[Mapping[str, float]] | None = None,
    seed: int | None = None,
) -> List[float]:
    """Concatenate normally distributed segments of the given mean, std and size."""

    if segments is None:
        segments = DEMO_SEGMENTS

    rng = np.random.default_rng(seed)
    parts: list[np.ndarray] = []
    for seg in segments:
        size = int(seg.get("size", 0))
        if size < 0:
            raise ValueError("segment size cannot be negative")
        std = float(seg.get("std", 1.0))
        if std < 0:
            raise ValueError("segment std cannot be negative")
        parts.append(rng.normal(loc=float(seg.get("mean", 0.0)), scale=std, size=size))

    if not parts:
        return []
    return np.concatenate(parts).tolist()


def segment_boundaries(segments: Sequence[Mapping[str, float]]) -> List[int]:
    """Indices where each segment after the first starts."""

    sizes = [int(seg.get("size", 0)) for seg in segments]
    return np.cumsum(sizes)[:-1].tolist() if sizes else []


def ingest_samples(path: str | Path, value_column: str | None = None) -> List[float]:
    """Load samples from CSV, JSON list, or JSONL file."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    if path.suffix.lower() == ".jsonl":
        values = []
        for line in path.read_text(encoding="utf-8").splitlines():
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(obj, (int, float)):
                values.append(float(obj))
            elif isinstance(obj, dict) and value_column and value_column in obj:
                values.append(float(obj[value_column]))
        return values

    if path.suffix.lower() == ".json":
        loaded = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict) and isinstance(loaded.get("samples"), list):
            loaded = loaded["samples"]
        if isinstance(loaded, list):
            return [float(x) for x in loaded if isinstance(x, (int, float))]
        raise ValueError("JSON sample file must contain a list of numbers")

    df = pd.read_csv(path)
    if df.empty:
        raise ValueError(f"Sample file {path} is empty")
    if value_column is None:
        value_column = "value" if "value" in df.columns else df.columns[0]
    if value_column not in df.columns:
        raise ValueError(f"Column '{value_column}' not found in {path}")
    return df[value_column].astype(float).tolist()
