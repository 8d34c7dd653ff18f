from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from nunc import cli
from nunc.changepoint.threshold import estimate_threshold


def test_cli_detect_writes_changepoints(tmp_path: Path) -> None:
    samples_path = tmp_path / "samples.csv"
    pd.DataFrame({"value": [0.0] * 50 + [100.0] * 50}).to_csv(samples_path, index=False)
    output_path = tmp_path / "detected.json"

    cli.main(
        [
            "detect",
            str(samples_path),
            "--window",
            "50",
            "--quantiles",
            "3",
            "--threshold",
            "5.0",
            "--output",
            str(output_path),
        ]
    )

    result = json.loads(output_path.read_text(encoding="utf-8"))
    assert result["samples"] == 100
    assert result["changepoints"] == [50]
    assert result["threshold"] == 5.0
    assert result["config"]["window_size"] == 50


def test_cli_threshold_json(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["threshold", "-w", "300", "-q", "3", "-p", "0.02", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["threshold"] == pytest.approx(estimate_threshold(0.02, 1000, 300, 3))
    assert payload["window_size"] == 300


def test_cli_threshold_rejects_bad_probability() -> None:
    with pytest.raises(SystemExit):
        cli.main(["threshold", "-p", "1.5"])


def test_cli_demo_reports_true_changepoints(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["demo", "--seed", "7", "--window", "100", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["samples"] == 7400
    assert payload["true_changepoints"] == [700, 1300, 2000, 2400]
    # the last two segments share a distribution
    for boundary in payload["true_changepoints"][:3]:
        assert any(abs(index - boundary) <= 50 for index in payload["changepoints"])


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["version"])
    assert capsys.readouterr().out.strip() == cli.__version__
