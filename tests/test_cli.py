"""Tests for the click command line."""

import json

import pytest
import soundfile as sf
from click.testing import CliRunner

from voxedit.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_info(runner, memo_wav) -> None:
    result = runner.invoke(cli, ["info", str(memo_wav), "--min-duration", "0.5"])
    assert result.exit_code == 0, result.output
    assert "Duration: 10.000s" in result.output
    assert "Silence regions: 2" in result.output
    assert "Speech regions: 3" in result.output


def test_info_on_broken_file(runner, tmp_path) -> None:
    broken = tmp_path / "broken.wav"
    broken.write_bytes(b"nope")
    result = runner.invoke(cli, ["info", str(broken)])
    assert result.exit_code != 0
    assert "Cannot read audio info" in result.output


def test_waveform_json(runner, memo_wav) -> None:
    result = runner.invoke(cli, ["waveform", str(memo_wav), "--points", "50", "--zoom", "1"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert len(payload["points"]) == 50
    assert payload["duration"] == pytest.approx(10.0)
    assert payload["zoom_level"] == 0
    assert max(payload["points"]) <= 1.0


def test_silence_json(runner, memo_wav) -> None:
    result = runner.invoke(
        cli, ["silence", str(memo_wav), "--min-duration", "0.5", "--json"]
    )
    assert result.exit_code == 0, result.output
    ranges = json.loads(result.output)
    assert len(ranges) == 2
    assert ranges[0]["start"] == pytest.approx(2.0, abs=0.011)


def test_cut_to_output(runner, memo_wav, tmp_path) -> None:
    output = tmp_path / "cut.wav"
    result = runner.invoke(cli, ["cut", str(memo_wav), "2.0", "3.0", "-o", str(output)])
    assert result.exit_code == 0, result.output
    assert sf.info(str(output)).duration == pytest.approx(9.0)


def test_trim_writes_edited_file(runner, memo_wav) -> None:
    result = runner.invoke(cli, ["trim", str(memo_wav), "1.0", "4.0"])
    assert result.exit_code == 0, result.output
    edited = list(memo_wav.parent.glob("memo_edited_*.wav"))
    assert len(edited) == 1
    assert sf.info(str(edited[0])).duration == pytest.approx(3.0)


def test_invalid_trim_fails(runner, memo_wav) -> None:
    result = runner.invoke(cli, ["trim", str(memo_wav), "0", "10"])
    assert result.exit_code != 0
    assert "Trim failed" in result.output


def test_remove_silence(runner, memo_wav, tmp_path) -> None:
    output = tmp_path / "tight.wav"
    result = runner.invoke(cli, ["remove-silence", str(memo_wav), "-o", str(output)])
    assert result.exit_code == 0, result.output
    assert "Removed 2 range(s)" in result.output
    assert sf.info(str(output)).duration == pytest.approx(8.2, abs=0.02)
