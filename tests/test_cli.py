"""Tests for the levelforge command line."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from level_forge.cli.main import cli

SMALL = ["--width", "40", "--height", "12", "--seed", "1"]


@pytest.fixture
def runner(tmp_path, monkeypatch):
    # Run from an empty directory so no stray level-forge.toml is picked up.
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def _write_toml(path, text: str) -> None:
    (path / "level-forge.toml").write_text(text)


class TestSample:
    def test_json_output(self, runner):
        result = runner.invoke(
            cli, ["sample", "--coins", "3", "--jumps", "2", "--kills", "1", *SMALL, "--json-output"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert set(data) == {"fitness", "counts", "profile", "level"}
        assert data["profile"] == {"coins": 3, "jumps": 2, "kills": 1}
        assert data["level"]["width"] == 40
        assert len(data["level"]["rows"]) == 12

    def test_text_output(self, runner):
        result = runner.invoke(cli, ["sample", "--coins", "3", *SMALL])
        assert result.exit_code == 0, result.output
        assert "Fitness" in result.output

    def test_castle_type(self, runner):
        result = runner.invoke(cli, ["sample", "--type", "castle", *SMALL, "--json-output"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["level"]["level_type"] == "castle"

    def test_negative_target(self, runner):
        result = runner.invoke(cli, ["sample", "--coins=-2", *SMALL])
        assert result.exit_code == 1
        assert "coins" in result.output


class TestEvolve:
    def test_json_output(self, runner):
        result = runner.invoke(
            cli,
            ["evolve", "--coins", "3", "--jumps", "2", "--kills", "1", *SMALL, "-g", "2", "--json-output"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_generations"] == 2
        assert data["convergence_reason"] == "generation_limit"
        assert len(data["history"]) == 2
        assert data["level"]["width"] == 40

    def test_text_output(self, runner):
        result = runner.invoke(
            cli, ["evolve", "--coins", "3", "--kills", "1", *SMALL, "-g", "2", "--show-level"]
        )
        assert result.exit_code == 0, result.output
        assert "# Evolution Result" in result.output
        assert "Generations" in result.output

    def test_thinning_flag(self, runner):
        result = runner.invoke(
            cli, ["evolve", "--coins", "3", *SMALL, "-g", "1", "--truncation", "thinning", "--json-output"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["history"][0]["population_size"] == 35

    def test_settings_from_toml(self, runner, tmp_path):
        _write_toml(
            tmp_path,
            """
[level-forge]
width = 40
height = 12

[level-forge.profile]
coins = 2
kills = 1

[level-forge.evolve]
generations = 1
steady-state-size = 4
max-population = 8
seed = 3
""",
        )
        result = runner.invoke(cli, ["evolve", "--json-output"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["profile"] == {"coins": 2, "jumps": 0, "kills": 1}
        assert data["total_generations"] == 1
        assert data["history"][0]["population_size"] == 4
        assert data["level"]["width"] == 40

    def test_cli_flag_beats_toml(self, runner, tmp_path):
        _write_toml(
            tmp_path,
            """
[level-forge]
width = 40
height = 12

[level-forge.profile]
coins = 2

[level-forge.evolve]
generations = 1
steady-state-size = 4
max-population = 8
""",
        )
        result = runner.invoke(cli, ["evolve", "--coins", "6", "--json-output"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["profile"]["coins"] == 6

    def test_invalid_config(self, runner, tmp_path):
        _write_toml(
            tmp_path,
            """
[level-forge.evolve]
steady-state-size = 10
max-population = 5
""",
        )
        result = runner.invoke(cli, ["evolve", *SMALL, "-g", "1"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
