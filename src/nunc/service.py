"""FastAPI service exposing a single shared changepoint detector."""

from __future__ import annotations

from importlib import metadata
from threading import Lock
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, FiniteFloat

from .changepoint.detector import Detector
from .changepoint.threshold import estimate_threshold
from .config import DetectorConfig, load_detector_config
from .models import ChangepointEvent

try:
    __version__ = metadata.version("nunc")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.3.0"


class ObserveRequest(BaseModel):
    values: List[FiniteFloat] = Field(default_factory=list)


class EstimateRequest(BaseModel):
    probability: float = 0.02
    run_length: int = 1000
    window_size: int = 300
    quantiles: int = 3


def create_app(config: DetectorConfig | None = None) -> FastAPI:
    app = FastAPI(title="NUNC Changepoint API", version=__version__)
    cfg = config or load_detector_config()
    state: Dict[str, Detector] = {"detector": Detector.from_config(cfg)}
    # evaluation and dedupe are not atomic inside the detector
    lock = Lock()

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    def version() -> Dict[str, str]:
        return {"version": __version__}

    @app.get("/threshold")
    def threshold() -> Dict[str, Any]:
        return dict(state["detector"].threshold.describe())

    @app.post("/observe")
    def observe(request: ObserveRequest) -> Dict[str, Any]:
        events: list[ChangepointEvent] = []
        with lock:
            detector = state["detector"]
            for value in request.values:
                try:
                    result = detector.step(value)
                except ValueError as exc:
                    raise HTTPException(status_code=422, detail=str(exc))
                if result.is_changepoint:
                    events.append(ChangepointEvent.from_result(result))
            count = detector.window.count()
        return {
            "changepoints": [e.index for e in events],
            "events": [e.model_dump(mode="json") for e in events],
            "count": count,
        }

    @app.get("/changepoints")
    def changepoints() -> Dict[str, Any]:
        detector = state["detector"]
        return {"changepoints": detector.reported_changepoints(), "count": detector.window.count()}

    @app.post("/reset")
    def reset() -> Dict[str, Any]:
        with lock:
            state["detector"] = Detector.from_config(cfg)
        return {"status": "reset"}

    @app.post("/estimate")
    def estimate(request: EstimateRequest) -> Dict[str, Any]:
        try:
            value = estimate_threshold(request.probability, request.run_length, request.window_size, request.quantiles)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        return {"threshold": value, **request.model_dump()}

    return app
