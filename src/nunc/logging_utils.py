"""Structured logging for detector events.

Events carry their fields on the log record (``record.fields``) rather than
baked into the message, so the same call renders as a JSON object or as
``key=value`` text depending on how logging was configured.
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any, Dict, Mapping

if TYPE_CHECKING:
    from .changepoint.detector import Detector

JSON_LOGS_ENV = "NUNC_JSON_LOGS"
TEXT_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def json_logs_enabled(json_logs: bool | None = None) -> bool:
    if json_logs is None:
        return os.getenv(JSON_LOGS_ENV, "false").lower() == "true"
    return json_logs


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, message plus event fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "fields", {}))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain text lines with event fields appended as ``key=value`` pairs."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields: Mapping[str, Any] = getattr(record, "fields", {})
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def configure_logging(level: str = "INFO", json_logs: bool | None = None) -> None:
    """Configure global logging. Respects NUNC_JSON_LOGS env override."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_logs_enabled(json_logs) else KeyValueFormatter())
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), handlers=[handler])


def detector_context(detector: "Detector") -> Dict[str, Any]:
    """Fields identifying a detector's setup, attached to every event it emits."""

    return {
        "window_size": detector.window.capacity(),
        "quantiles": detector.quantile_count,
        "threshold_type": detector.threshold.name,
        "threshold": round(detector.threshold_value(), 6),
    }


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    detector: "Detector | None" = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit a structured event, tagged with the detector's setup when given."""

    payload: Dict[str, Any] = {"event": event}
    if detector is not None:
        payload.update(detector_context(detector))
    payload.update(fields)
    logger.log(level, event, extra={"fields": payload})
