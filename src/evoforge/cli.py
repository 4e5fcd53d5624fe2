"""
Command-line interface for evoforge.

Provides commands for:
- Running the built-in benchmark problems
- Showing installation info
"""

import json
import logging
from pathlib import Path

import click
from pydantic import ValidationError

from evoforge import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("evoforge")

PROBLEM_NAMES = ["symbolic-regression", "ordering", "zdt1-like"]
SELECTION_NAMES = ["roulette", "tournament", "truncation", "multi-objective"]


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(verbose: bool) -> None:
    """evoforge - Evolutionary Optimization Engine."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@main.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON run configuration (options given here override it)",
)
@click.option("--problem", type=click.Choice(PROBLEM_NAMES), default=None, help="Problem to solve")
@click.option("--seed", "-s", type=int, default=None, help="Random seed")
@click.option("--population-size", "-p", type=int, default=None, help="Organisms per generation")
@click.option("--epochs", "-e", type=int, default=None, help="Number of epochs")
@click.option("--selection", type=click.Choice(SELECTION_NAMES), default=None, help="Parent selection")
@click.option("--workers", "-w", type=int, default=None, help="Evaluation threads")
@click.option("--timeout", type=float, default=None, help="Seconds allowed per evaluation")
@click.option("--no-cache", is_flag=True, help="Disable the fitness cache")
@click.option("--output", "-o", default=None, help="Output file for the run summary")
def run(
    config_path: str | None,
    problem: str | None,
    seed: int | None,
    population_size: int | None,
    epochs: int | None,
    selection: str | None,
    workers: int | None,
    timeout: float | None,
    no_cache: bool,
    output: str | None,
) -> None:
    """Evolve a solution to a built-in problem."""
    from evoforge.benchmarks import get_problem
    from evoforge.config import RunConfig
    from evoforge.engine.observer import LoggingObserver
    from evoforge.engine.scheduler import GeneticAlgorithm
    from evoforge.exceptions import GeneticError

    overrides = {
        "problem": problem,
        "seed": seed,
        "population_size": population_size,
        "epochs": epochs,
        "selection": selection,
        "workers": workers,
        "timeout": timeout,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if no_cache:
        overrides["use_cache"] = False

    try:
        base = RunConfig.from_file(config_path) if config_path else RunConfig()
        run_config = RunConfig.model_validate({**base.model_dump(), **overrides})
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration:\n{e}") from e

    chosen = get_problem(run_config.problem)
    click.echo(f"Problem: {chosen.name} - {chosen.description}")

    try:
        environment = run_config.to_environment(chosen.sense)
        population = chosen.create_population(environment)
        ga = GeneticAlgorithm(
            chosen.evaluator,
            observer=LoggingObserver(),
            config=run_config.to_evolution_config(),
        )
        ga.evolve(population)
    except GeneticError as e:
        raise click.ClickException(str(e)) from e

    summary = {
        "problem": chosen.name,
        "seed": environment.random_source.seed,
        "generation": population.generation,
        "population_size": len(population),
        "average_fitness": population.average_fitness,
        "cache_entries": len(ga.cache),
        "environment": environment.to_dict(),
    }

    click.echo(f"Seed: {environment.random_source.seed}")
    click.echo(f"Generations: {population.generation}")
    click.echo(f"Average fitness: {population.average_fitness:.6g}")

    if population.is_multi_objective:
        front = sorted(population.get_pareto_front(), key=lambda org: org.objectives or [])
        summary["pareto_front"] = [org.objectives for org in front]
        click.echo(f"Pareto front: {len(front)} organisms")
        for organism in front[:10]:
            values = ", ".join(f"{v:.4f}" for v in organism.objectives or [])
            click.echo(f"  ({values})  {chosen.describe(organism.genotype)}")
    elif population.best_organism is not None:
        best = population.best_organism
        summary["best_fitness"] = best.fitness
        summary["best_genome"] = chosen.describe(best.genotype)
        summary["best_genotype"] = best.genotype.to_dict()
        click.echo(f"Best fitness: {best.fitness:.6g}")
        click.echo(f"Best genome: {chosen.describe(best.genotype)}")

    if output:
        Path(output).write_text(json.dumps(summary, indent=2))
        click.echo(f"\nSummary saved to {output}")


@main.command()
def info() -> None:
    """Show evoforge installation info."""
    import numpy as np
    import pydantic

    click.echo(f"evoforge v{__version__}\n")
    click.echo("Dependencies:")
    click.echo(f"  numpy: {np.__version__}")
    click.echo(f"  pydantic: {pydantic.VERSION}")
    click.echo(f"  click: {_click_version()}")

    click.echo("\nProblems:")
    for name in PROBLEM_NAMES:
        click.echo(f"  - {name}")


def _click_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("click")
    except PackageNotFoundError:
        return "unknown"


if __name__ == "__main__":
    main()
