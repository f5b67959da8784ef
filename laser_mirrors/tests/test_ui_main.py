from __future__ import annotations

import json

import pytest

from laser_mirrors.config import MAX_BOUNCES_ENV_VAR, PuzzleConfig
from laser_mirrors.ui.main import describe_config, headless_summary, main


def test_describe_config_lists_every_setting():
    text = describe_config(PuzzleConfig())

    assert text.startswith("Laser Mirrors settings")
    assert "  max_bounces: 20" in text
    assert "  charge_duration_ms: 2000.0" in text
    assert MAX_BOUNCES_ENV_VAR in text


def test_cli_info(capsys: pytest.CaptureFixture[str]):
    exit_code = main(["--info"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Laser Mirrors settings" in output
    assert "max_bounces: 20" in output


def test_cli_info_honours_environment(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(MAX_BOUNCES_ENV_VAR, "3")

    main(["--info"])

    assert "max_bounces: 3" in capsys.readouterr().out


def test_cli_trace_prints_json(capsys: pytest.CaptureFixture[str]):
    exit_code = main(["--trace", "--size", "400x672"])
    summary = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert summary["area"] == [400.0, 600.0]
    assert summary["path"][0] == [200.0, 20.0]
    assert summary["end"] == "wall"
    assert summary["target"]["center"] == [320.0, 480.0]
    assert len(summary["reflectors"]) == 3


def test_cli_rejects_bad_size():
    with pytest.raises(SystemExit):
        main(["--trace", "--size", "wide"])


def test_headless_summary_uses_play_area():
    summary = headless_summary((800, 672), PuzzleConfig())

    assert summary["emitter"] == [400.0, 20.0]
    assert summary["path"][-1] == [400.0, 600.0]
