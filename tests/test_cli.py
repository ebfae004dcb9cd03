"""Command line interface tests."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from chance_music import cli  # noqa: E402
from chance_music.errors import ModelingPreconditionError  # noqa: E402


def _run_json(capsys, argv):
    cli.run_cli(argv)
    return json.loads(capsys.readouterr().out)


def test_json_output(capsys):
    data = _run_json(capsys, ["--seed", "3", "--json", "--repeats", "2"])
    assert set(data) == {"melody", "rhythm", "arrangements"}
    assert data["melody"][0] == 0 and data["melody"][-1] == 0
    assert len(data["arrangements"]) == 2


def test_same_seed_same_output(capsys):
    first = _run_json(capsys, ["--seed", "11", "--json"])
    second = _run_json(capsys, ["--seed", "11", "--json"])
    assert first == second


def test_seed_from_environment(monkeypatch, capsys):
    monkeypatch.setenv(cli.SEED_ENV_VAR, "5")
    from_env = _run_json(capsys, ["--json"])
    monkeypatch.delenv(cli.SEED_ENV_VAR)
    explicit = _run_json(capsys, ["--seed", "5", "--json"])
    assert from_env == explicit


def test_bad_seed_environment_is_ignored(monkeypatch, caplog):
    monkeypatch.setenv(cli.SEED_ENV_VAR, "abc")
    with caplog.at_level(logging.WARNING):
        assert cli._default_seed() is None
    assert cli.SEED_ENV_VAR in caplog.text


def test_defaults_to_json_without_output(capsys):
    data = _run_json(capsys, ["--seed", "1"])
    assert "melody" in data


def test_writes_midi_file(tmp_path, capsys):
    out = tmp_path / "out" / "song.mid"
    cli.run_cli(["--seed", "2", "--output", str(out)])
    assert out.is_file()
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize(
    "argv",
    [["--repeats", "0"], ["--bpm", "0"], ["--program", "128"], ["--tonic", "H4"]],
)
def test_invalid_options_exit(argv, caplog):
    with caplog.at_level(logging.ERROR):
        with pytest.raises(SystemExit) as exc:
            cli.run_cli(argv)
    assert exc.value.code == 1
    assert caplog.records


def test_generation_failure_exits(monkeypatch, caplog):
    def _fail(_repeats):
        raise ModelingPreconditionError("no harmonization")

    monkeypatch.setattr(cli, "generate_song", _fail)
    with caplog.at_level(logging.ERROR):
        with pytest.raises(SystemExit) as exc:
            cli.run_cli(["--seed", "1", "--json"])
    assert exc.value.code == 1
    assert "Song generation failed" in caplog.text


def test_unwritable_output_exits(monkeypatch, tmp_path, caplog):
    import chance_music

    def _write(*_a, **_kw):
        raise OSError("permission denied")

    monkeypatch.setattr(chance_music, "create_midi_file", _write)
    with caplog.at_level(logging.ERROR):
        with pytest.raises(SystemExit) as exc:
            cli.run_cli(["--seed", "1", "--output", str(tmp_path / "x.mid")])
    assert exc.value.code == 1
    assert "permission denied" in caplog.text
