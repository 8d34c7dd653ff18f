"""Command line interface for the NUNC changepoint detector."""

from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from . import __version__
from .changepoint.detector import Detector
from .changepoint.threshold import estimate_threshold
from .config import DetectorConfig, load_detector_config
from .logging_utils import configure_logging
from .models import ChangepointEvent
from .probe import PROBE_MODES, RTTProbe
from .service import create_app
from .signals import DEMO_SEGMENTS, generate_normal_segments, ingest_samples, segment_boundaries
from .streaming.service import StreamingService
from .streaming.sources import ProbeSource

logger = logging.getLogger(__name__)

DEMO_WINDOW_SIZE = 250


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2))
    else:
        print(result)


def _add_detector_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-w", "--window", type=int, help="Size of the detection window")
    parser.add_argument("-q", "--quantiles", type=int, help="Number of quantiles to probe")
    parser.add_argument("-t", "--threshold", type=float, help="Static cost threshold (overrides --probability)")
    parser.add_argument(
        "-p",
        "--probability",
        type=float,
        help="Chance of a false changepoint per --run-length datapoints",
    )
    parser.add_argument("--run-length", type=int, help="Datapoints the false-alarm probability applies to")


def _resolve_config(args: argparse.Namespace, **defaults: Any) -> DetectorConfig:
    try:
        base = load_detector_config(args.config)
        values = {**base.model_dump(), **defaults}
        overrides = {
            "window_size": args.window,
            "quantiles": args.quantiles,
            "threshold": args.threshold,
            "probability": args.probability,
            "run_length": args.run_length,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return DetectorConfig(**values)
    except (ValidationError, ValueError, FileNotFoundError) as exc:
        raise SystemExit(f"Invalid detector configuration: {exc}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nunc",
        description="Detect changes in the distribution of a data stream with NUNC.",
    )
    parser.add_argument("--config", type=Path, help="Path to detector configuration (YAML or JSON)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Run the detector over a sample file")
    detect.add_argument("samples", type=Path, help="Path to CSV/JSON/JSONL samples")
    detect.add_argument("--value-column", type=str, help="Column name for CSV/JSONL inputs")
    detect.add_argument("--output", type=Path, help="Optional path to write detection JSON")
    detect.add_argument("--json", action="store_true", help="Emit detection result as JSON")
    _add_detector_args(detect)

    demo = subparsers.add_parser("demo", help="Run the detector over synthetic segments with known changes")
    demo.add_argument("--seed", type=int, help="Random seed for the synthetic data")
    demo.add_argument("--json", action="store_true", help="Emit demo result as JSON")
    _add_detector_args(demo)

    ping = subparsers.add_parser("ping", help="Watch round-trip latency to a host for changes")
    ping.add_argument("host", help="Target host name or address")
    ping.add_argument("--mode", choices=PROBE_MODES, default="icmp", help="ICMP echo (default) or TCP connect timing")
    ping.add_argument("--port", type=int, default=80, help="Target TCP port for --mode tcp (default: 80)")
    ping.add_argument("-c", "--count", type=int, default=0, help="Number of probes before exiting, 0 for infinite")
    ping.add_argument("-i", "--interval", type=int, default=1000, help="Milliseconds between probes")
    ping.add_argument("--timeout", type=float, default=1.0, help="Seconds to wait for each reply")
    _add_detector_args(ping)

    threshold = subparsers.add_parser("threshold", help="Print the estimated cost threshold")
    threshold.add_argument("--json", action="store_true", help="Emit threshold as JSON")
    _add_detector_args(threshold)

    serve = subparsers.add_parser("serve", help="Run FastAPI service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    _add_detector_args(serve)

    subparsers.add_parser("version", help="Display the installed version")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)

    if args.command == "detect":
        config = _resolve_config(args)
        try:
            samples = ingest_samples(args.samples, value_column=args.value_column)
        except (FileNotFoundError, ValueError) as exc:
            raise SystemExit(str(exc))
        detector = Detector.from_config(config)
        changepoints = detector.observe_many(samples)
        result = {
            "samples": len(samples),
            "threshold": detector.threshold_value(),
            "changepoints": changepoints,
            "config": config.as_dict(),
        }
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(json.dumps(result, indent=2), encoding="utf-8")
            print(f"Wrote {len(changepoints)} changepoints to {args.output}")
        elif args.json:
            _print_result(result, as_json=True)
        else:
            print(f"Estimated cost threshold: {result['threshold']:f}")
            for index in changepoints:
                print(f"Changepoint detected at index {index}")
    elif args.command == "demo":
        config = _resolve_config(args, window_size=DEMO_WINDOW_SIZE)
        samples = generate_normal_segments(DEMO_SEGMENTS, seed=args.seed)
        detector = Detector.from_config(config)
        start = time.perf_counter()
        changepoints = detector.observe_many(samples)
        elapsed = time.perf_counter() - start
        result = {
            "samples": len(samples),
            "threshold": detector.threshold_value(),
            "true_changepoints": segment_boundaries(DEMO_SEGMENTS),
            "changepoints": changepoints,
            "elapsed_s": elapsed,
        }
        if args.json:
            _print_result(result, as_json=True)
        else:
            print(f"Estimated cost threshold: {result['threshold']:f}")
            for index in changepoints:
                print(f"Changepoint detected at index {index}")
            print(f"Executed NUNC on {len(samples)} datapoints in {elapsed:.3f}s")
    elif args.command == "ping":
        config = _resolve_config(args)
        try:
            probe = RTTProbe(
                args.host,
                args.port,
                count=args.count,
                interval=args.interval / 1000.0,
                timeout=args.timeout,
                mode=args.mode,
            )
        except ValueError as exc:
            raise SystemExit(str(exc))
        logger.debug("Created %s probe for %s", args.mode, probe.target)

        def report(event: ChangepointEvent) -> None:
            print(f"Changepoint at {event.index} || cost {event.cost:.3f} > threshold {event.threshold:.3f}")

        service = StreamingService(lambda: ProbeSource(probe), Detector.from_config(config), on_changepoint=report)
        try:
            service.run()
        except KeyboardInterrupt:
            service.stop()
    elif args.command == "threshold":
        config = _resolve_config(args)
        try:
            value = estimate_threshold(config.probability, config.run_length, config.window_size, config.quantiles)
        except ValueError as exc:
            raise SystemExit(str(exc))
        payload = {"threshold": value, **config.as_dict()}
        if args.json:
            _print_result(payload, as_json=True)
        else:
            print(f"{value:f}")
    elif args.command == "serve":
        app = create_app(_resolve_config(args))
        try:
            import uvicorn
        except ModuleNotFoundError:
            raise SystemExit("uvicorn is required to run the service. Install with `pip install uvicorn`.")
        uvicorn.run(app, host=args.host, port=args.port)
    elif args.command == "version":
        print(__version__)


if __name__ == "__main__":
    main()
