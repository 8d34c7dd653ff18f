"""CLI wrapper to watch round-trip latency to a host for distribution changes."""

from __future__ import annotations

import argparse

from nunc import Detector, RTTProbe


def main() -> None:
    parser = argparse.ArgumentParser(description="Check for changes in round-trip latency distribution")
    parser.add_argument("host", help="Target host name or address")
    parser.add_argument("--mode", choices=["icmp", "tcp"], default="icmp", help="ICMP echo or TCP connect timing")
    parser.add_argument("--port", type=int, default=80, help="Target TCP port for --mode tcp")
    parser.add_argument("-c", "--count", type=int, default=0, help="Number of probes before exiting, 0 for infinite")
    parser.add_argument("-i", "--interval", type=int, default=1000, help="Milliseconds between probes")
    parser.add_argument("-w", "--window", type=int, default=300, help="Size of the detection window")
    parser.add_argument("-q", "--quantiles", type=int, default=3, help="Number of quantiles to probe")
    parser.add_argument("-p", "--probability", type=float, default=0.02, help="False-alarm probability per 1000 datapoints")
    args = parser.parse_args()

    detector = Detector(args.window, args.quantiles, probability=args.probability)
    probe = RTTProbe(args.host, args.port, count=args.count, interval=args.interval / 1000.0, mode=args.mode)
    for rtt in probe:
        index = detector.observe(rtt)
        if index is not None:
            print(f"Changepoint at {index} || RTT: {rtt * 1000.0:.3f}ms")


if __name__ == "__main__":
    main()
