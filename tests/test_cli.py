"""Tests for the lazypick CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from lazypick.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestSimulateCommand:
    """Tests for `lazypick simulate`."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["simulate", "--help"])
        assert result.exit_code == 0
        assert "NAME=SIZE" in result.output

    def test_completes(self, runner):
        result = runner.invoke(cli, ["simulate", "-p", "a=2", "-p", "b=2"])
        assert result.exit_code == 0
        assert "All combinations covered in 4 run(s)" in result.output
        assert "Simulated runs" in result.output

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["simulate", "-p", "a=2", "-p", "b=2", "-u", "u=3", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["completed"] is True
        assert data["limit"] is None
        assert data["runs"][0] == {"run": 1, "values": {"a": 0, "b": 0, "u": 0}}
        assert data["coverage"]["coverage_pct"] == 100.0
        assert data["coverage"]["missing"] == []

    def test_pocket_parameters_fully_combined(self, runner):
        result = runner.invoke(cli, ["simulate", "--pocket", "x=2", "--pocket", "y=3", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        pairs = {(run["values"]["x"], run["values"]["y"]) for run in data["runs"]}
        assert len(pairs) == 6

    def test_limit_reached(self, runner):
        result = runner.invoke(cli, ["simulate", "-p", "a=3", "-p", "b=3", "--max-total", "2"])
        assert result.exit_code == 1
        assert "Stopped" in result.output

    def test_single_run_is_quiet(self, runner):
        result = runner.invoke(cli, ["simulate", "-p", "a=3", "--max-total", "1"])
        assert result.exit_code == 0
        assert "Stopped after 1 run(s)" in result.output

    def test_no_parameters(self, runner):
        result = runner.invoke(cli, ["simulate"])
        assert result.exit_code == 2

    @pytest.mark.parametrize("value", ["a", "=2", "a=x", "a=0", "a=65481"])
    def test_bad_parameter(self, runner, value):
        result = runner.invoke(cli, ["simulate", "-p", value])
        assert result.exit_code == 2

    def test_config_file(self, runner, tmp_path):
        path = tmp_path / "lazypick.yaml"
        path.write_text("max_total_count: 2\n")
        result = runner.invoke(cli, ["--config", str(path), "simulate", "-p", "a=3", "-p", "b=3"])
        assert result.exit_code == 1

    def test_invalid_config_file(self, runner, tmp_path):
        path = tmp_path / "lazypick.yaml"
        path.write_text("max_total_count: 0\n")
        result = runner.invoke(cli, ["--config", str(path), "simulate", "-p", "a=2"])
        assert result.exit_code == 1
        assert "Error [E201]" in result.output
        assert "max_total_count must be at least 1" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)
