"""Tests for the command-line interface."""

from types import SimpleNamespace

import yaml
from click.testing import CliRunner

from causal_playground import __version__, cli
from causal_playground.cli import main


class TestCli:
    """Tests for the causal-playground command."""

    def test_example_run(self):
        """Test running a built-in example."""
        result = CliRunner().invoke(main, ["--example", "chain", "-n", "300", "-s", "1", "-q"])

        assert result.exit_code == 0
        assert "CAUSAL SIMULATION RESULTS" in result.output
        assert "fire:" in result.output

    def test_config_run(self, tmp_path):
        """Test running a YAML scenario with output."""
        config_path = tmp_path / "scenario.yaml"
        config_path.write_text(yaml.safe_dump({
            "example": "collider",
            "observations": {"success": "True"},
        }))

        result = CliRunner().invoke(main, [
            "--config", str(config_path),
            "--samples", "300",
            "--seed", "2",
            "--output", str(tmp_path / "out"),
            "--quiet",
        ])

        assert result.exit_code == 0
        assert (tmp_path / "out" / "marginals.yaml").exists()

    def test_requires_source(self):
        """Test running without a graph source fails."""
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 1

    def test_bad_sample_count(self):
        """Test invalid overrides exit with an error."""
        result = CliRunner().invoke(main, ["--example", "fork", "--samples", "0", "-q"])
        assert result.exit_code == 1

    def test_version(self):
        """Test version output."""
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_malformed_graph_file(self, tmp_path):
        """Test a graph file with a node missing its id exits cleanly."""
        graph_path = tmp_path / "graph.yaml"
        graph_path.write_text(yaml.safe_dump({"nodes": [{"name": "NoId"}]}))
        config_path = tmp_path / "scenario.yaml"
        config_path.write_text(yaml.safe_dump({"graph_path": "graph.yaml"}))

        result = CliRunner().invoke(main, ["--config", str(config_path), "-q"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable scenario YAML exits cleanly."""
        config_path = tmp_path / "scenario.yaml"
        config_path.write_text("example: [chain\n")

        result = CliRunner().invoke(main, ["--config", str(config_path), "-q"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_verbose_by_default(self, monkeypatch):
        """Test logging is verbose unless --quiet is given."""
        seen = []

        class RecordingPipeline:
            def __init__(self, config):
                seen.append(config.verbose)

            def run(self):
                return SimpleNamespace(summary="done")

        monkeypatch.setattr(cli, "SimulationPipeline", RecordingPipeline)

        assert CliRunner().invoke(main, ["--example", "chain"]).exit_code == 0
        assert CliRunner().invoke(main, ["--example", "chain", "--quiet"]).exit_code == 0
        assert seen == [True, False]
