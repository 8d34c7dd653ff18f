"""Round-trip latency probe used to feed live samples into a detector."""

from __future__ import annotations

import logging
import socket
import time
from typing import Iterator

import icmplib
from icmplib.exceptions import ICMPLibError

logger = logging.getLogger(__name__)

PROBE_MODES = ("icmp", "tcp")


def ping_rtt(host: str, timeout: float = 1.0) -> float:
    """Send one ICMP echo request and return the round-trip time in seconds.

    Uses unprivileged datagram ICMP sockets, so no root is needed on Linux as
    long as ``net.ipv4.ping_group_range`` covers the current group.
    """

    result = icmplib.ping(host, count=1, timeout=timeout, privileged=False)
    if not result.is_alive:
        raise TimeoutError(f"no echo reply from {host} within {timeout}s")
    return result.avg_rtt / 1000.0


def connect_rtt(host: str, port: int = 80, timeout: float = 1.0) -> float:
    """Return the time in seconds taken to open a TCP connection to ``host``."""

    start = time.perf_counter()
    with socket.create_connection((host, port), timeout=timeout):
        elapsed = time.perf_counter() - start
    return elapsed


def measure_rtt(host: str, port: int = 80, timeout: float = 1.0, *, mode: str = "icmp") -> float:
    """Measure one round trip to ``host`` with ICMP echo or, if asked, a TCP connect."""

    if mode == "icmp":
        return ping_rtt(host, timeout=timeout)
    if mode == "tcp":
        return connect_rtt(host, port, timeout=timeout)
    raise ValueError(f"Unknown probe mode '{mode}'")


class RTTProbe:
    """Repeatedly measures round-trip time to a target.

    Failed attempts are logged and skipped. ``count=0`` probes forever.
    ``port`` only matters in ``tcp`` mode.
    """

    def __init__(
        self,
        host: str,
        port: int = 80,
        *,
        count: int = 0,
        interval: float = 1.0,
        timeout: float = 1.0,
        mode: str = "icmp",
    ) -> None:
        if count < 0:
            raise ValueError("count cannot be negative")
        if interval < 0:
            raise ValueError("interval cannot be negative")
        if mode not in PROBE_MODES:
            raise ValueError(f"mode must be one of {', '.join(PROBE_MODES)}")
        self.host = host
        self.port = int(port)
        self.count = int(count)
        self.interval = float(interval)
        self.timeout = float(timeout)
        self.mode = mode
        self.failures = 0

    @property
    def target(self) -> str:
        return f"{self.host}:{self.port}" if self.mode == "tcp" else self.host

    def __iter__(self) -> Iterator[float]:
        attempt = 0
        while not self.count or attempt < self.count:
            if attempt:
                time.sleep(self.interval)
            attempt += 1
            try:
                rtt = measure_rtt(self.host, self.port, timeout=self.timeout, mode=self.mode)
            except (OSError, ICMPLibError) as exc:
                self.failures += 1
                logger.warning("%s probe to %s failed: %s", self.mode.upper(), self.target, exc)
                continue
            logger.debug("%s probe to %s rtt=%.6fs", self.mode.upper(), self.target, rtt)
            yield rtt
