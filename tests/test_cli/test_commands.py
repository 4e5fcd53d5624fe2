"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from evoforge import __version__
from evoforge.cli import main
from evoforge.evolution.environment import Environment
from evoforge.genomes.permutation import PermutationGenome


class TestInfo:
    def test_lists_problems(self):
        result = CliRunner().invoke(main, ["info"])
        assert result.exit_code == 0
        assert f"evoforge v{__version__}" in result.output
        assert "numpy" in result.output
        assert "zdt1-like" in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestRun:
    """Test the run command end to end on small problems."""

    def test_ordering(self):
        result = CliRunner().invoke(
            main, ["run", "--problem", "ordering", "-s", "1", "-p", "10", "-e", "2", "-w", "2"]
        )
        assert result.exit_code == 0, result.output
        assert "Problem: ordering" in result.output
        assert "Seed: 1" in result.output
        assert "Generations: 2" in result.output
        assert "Best fitness:" in result.output

    def test_symbolic_regression(self):
        result = CliRunner().invoke(
            main, ["run", "--problem", "symbolic-regression", "-s", "4", "-p", "8", "-e", "1"]
        )
        assert result.exit_code == 0, result.output
        assert "Best genome:" in result.output

    def test_summary_genotype_reloads(self, tmp_path):
        output = tmp_path / "summary.json"
        result = CliRunner().invoke(
            main, ["run", "--problem", "ordering", "-s", "3", "-p", "8", "-e", "1", "-o", str(output)]
        )
        assert result.exit_code == 0, result.output

        summary = json.loads(output.read_text())
        genome = PermutationGenome.from_dict(summary["best_genotype"])
        assert sorted(genome.elements) == list(range(12))
        assert Environment.from_dict(summary["environment"]).random_source.seed == 3

    def test_multi_objective_writes_summary(self, tmp_path):
        output = tmp_path / "summary.json"
        result = CliRunner().invoke(
            main,
            [
                "run",
                "--problem", "zdt1-like",
                "--selection", "multi-objective",
                "-s", "2",
                "-p", "10",
                "-e", "2",
                "-o", str(output),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Pareto front:" in result.output

        summary = json.loads(output.read_text())
        assert summary["problem"] == "zdt1-like"
        assert summary["population_size"] == 10
        assert summary["pareto_front"]
        assert all(len(objectives) == 2 for objectives in summary["pareto_front"])
        assert summary["environment"]["population_size"] == 10
        assert summary["environment"]["seed"] == 2
        assert summary["environment"]["selection_method"]["kind"] == "multi_objective"

    def test_config_file_with_overrides(self, tmp_path):
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"problem": "ordering", "seed": 5, "population_size": 6, "epochs": 3}))

        result = CliRunner().invoke(main, ["run", "-c", str(path), "-e", "1", "--no-cache"])

        assert result.exit_code == 0, result.output
        assert "Seed: 5" in result.output
        assert "Generations: 1" in result.output

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"population_size": 1}))

        result = CliRunner().invoke(main, ["run", "-c", str(path)])

        assert result.exit_code != 0
        assert "Invalid configuration" in result.output

    def test_engine_error_reported(self):
        result = CliRunner().invoke(
            main, ["run", "--problem", "ordering", "-p", "6", "-e", "1", "--selection", "multi-objective"]
        )
        assert result.exit_code != 0
        assert "Multi-objective selection" in result.output
