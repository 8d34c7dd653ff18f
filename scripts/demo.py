"""CLI wrapper to run the detector over the synthetic demo dataset."""

from __future__ import annotations

import argparse
import time

from nunc import DEMO_SEGMENTS, Detector, generate_normal_segments


def main() -> None:
    parser = argparse.ArgumentParser(description="Run NUNC over synthetic segments with known changepoints")
    parser.add_argument("--window", type=int, default=250, help="Size of the detection window")
    parser.add_argument("--quantiles", type=int, default=3, help="Number of quantiles to probe")
    parser.add_argument("--probability", type=float, default=0.02, help="False-alarm probability per 1000 datapoints")
    parser.add_argument("--seed", type=int, help="Random seed for the synthetic data")
    args = parser.parse_args()

    samples = generate_normal_segments(DEMO_SEGMENTS, seed=args.seed)
    detector = Detector(args.window, args.quantiles, probability=args.probability)
    print(f"Estimated cost threshold: {detector.threshold_value():f}")

    start = time.perf_counter()
    for value in samples:
        index = detector.observe(value)
        if index is not None:
            print(f"Changepoint detected at index {index}")
    print(f"Executed NUNC on {len(samples)} datapoints in {time.perf_counter() - start:.3f}s")


if __name__ == "__main__":
    main()
