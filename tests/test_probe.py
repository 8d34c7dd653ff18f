from __future__ import annotations

import socket
from types import SimpleNamespace
from typing import Any

import pytest
from icmplib.exceptions import NameLookupError

from nunc import probe
from nunc.probe import RTTProbe, measure_rtt


def _reply(avg_rtt_ms: float, alive: bool = True) -> SimpleNamespace:
    return SimpleNamespace(is_alive=alive, avg_rtt=avg_rtt_ms)


def test_icmp_rtt_is_reported_in_seconds(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    def fake_ping(address: str, **kwargs: Any) -> SimpleNamespace:
        calls.append({"address": address, **kwargs})
        return _reply(12.5)

    monkeypatch.setattr(probe.icmplib, "ping", fake_ping)

    assert measure_rtt("example.test", timeout=0.5) == pytest.approx(0.0125)
    assert calls == [{"address": "example.test", "count": 1, "timeout": 0.5, "privileged": False}]


def test_icmp_without_reply_counts_as_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    replies = iter([_reply(4.0), _reply(0.0, alive=False), _reply(6.0)])
    monkeypatch.setattr(probe.icmplib, "ping", lambda address, **kwargs: next(replies))

    rtt_probe = RTTProbe("example.test", count=3, interval=0.0)

    assert list(rtt_probe) == pytest.approx([0.004, 0.006])
    assert rtt_probe.failures == 1


def test_icmp_library_errors_are_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_ping(address: str, **kwargs: Any) -> SimpleNamespace:
        raise NameLookupError(address)

    monkeypatch.setattr(probe.icmplib, "ping", fake_ping)
    rtt_probe = RTTProbe("missing.invalid", count=2, interval=0.0)

    assert list(rtt_probe) == []
    assert rtt_probe.failures == 2


def test_probe_skips_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    results = iter([0.005, OSError("unreachable"), 0.007])
    modes: list[str] = []

    def fake_measure(host: str, port: int, timeout: float, mode: str) -> float:
        modes.append(mode)
        value = next(results)
        if isinstance(value, Exception):
            raise value
        return value

    monkeypatch.setattr(probe, "measure_rtt", fake_measure)
    rtt_probe = RTTProbe("example.test", 443, count=3, interval=0.0, mode="tcp")

    assert list(rtt_probe) == [0.005, 0.007]
    assert rtt_probe.failures == 1
    assert modes == ["tcp"] * 3
    assert rtt_probe.target == "example.test:443"


def test_probe_rejects_bad_settings() -> None:
    with pytest.raises(ValueError):
        RTTProbe("example.test", count=-1)
    with pytest.raises(ValueError):
        RTTProbe("example.test", interval=-1.0)
    with pytest.raises(ValueError):
        RTTProbe("example.test", mode="udp")
    with pytest.raises(ValueError):
        measure_rtt("example.test", mode="udp")


def test_tcp_mode_against_local_listener() -> None:
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    try:
        port = server.getsockname()[1]
        rtt = measure_rtt("127.0.0.1", port, timeout=2.0, mode="tcp")
    finally:
        server.close()
    assert 0.0 <= rtt < 2.0
