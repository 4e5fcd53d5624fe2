"""Example: symbolic regression and a two-objective run with evoforge.

This example demonstrates:
- Array-encoded expression trees evolved by tournament selection
- Concurrent, cached fitness evaluation
- NSGA-II ranking on a ZDT1-style problem
"""

import numpy as np

from evoforge import (
    Environment,
    EvolutionConfig,
    GeneticAlgorithm,
    OptimizationSense,
    RandomSource,
    SelectionMethod,
)
from evoforge.benchmarks import REGRESSION_X, regression_target, symbolic_regression, zdt1_like
from evoforge.engine.observer import RecordingObserver
from evoforge.expression.compiler import evaluate_tree


def main():
    """Run a symbolic regression search."""
    print("=" * 80)
    print("evoforge Symbolic Regression")
    print("=" * 80)

    # =========================================================================
    # Step 1: Configure the environment
    # =========================================================================
    print("\n[Step 1] Configuring environment...")

    problem = symbolic_regression()
    environment = Environment(
        population_size=80,
        selection_method=SelectionMethod.tournament(4),
        mutation_rate=0.1,
        crossover_rate=0.9,
        number_of_elites=2,
        random_source=RandomSource(42),
        sense=problem.sense,
        max_generation_depth=4,
        parameters={"mutation_size": 0.2},
    )

    print(f"Problem: {problem.description}")
    print(f"Population size: {environment.population_size}")
    print(f"Selection: {environment.selection_method}")

    # =========================================================================
    # Step 2: Evolve
    # =========================================================================
    print("\n[Step 2] Evolving...")

    population = problem.create_population(environment)
    observer = RecordingObserver()
    ga = GeneticAlgorithm(
        problem.evaluator,
        observer=observer,
        config=EvolutionConfig(max_epochs=40, workers=4),
    )
    ga.evolve(population)

    best = population.best_organism
    print(f"\n✓ Evolution complete!")
    print(f"  - Generations: {population.generation}")
    print(f"  - Best fitness: {best.fitness:.6f}")
    print(f"  - Best formula: {best.genotype.to_string()}")
    print(f"  - Cache: {ga.cache}")

    # =========================================================================
    # Step 3: Inspect the best tree
    # =========================================================================
    print(f"\n{'='*80}")
    print("BEST EXPRESSION")
    print(f"{'='*80}")

    predicted = evaluate_tree(best.genotype, {"x": REGRESSION_X})
    error = np.abs(predicted - regression_target(REGRESSION_X))
    print(f"\nSize: {best.genotype.size} nodes, Depth: {best.genotype.depth}")
    print(f"Max abs error: {error.max():.4f}")
    print(f"Mean abs error: {error.mean():.4f}")

    print(f"\nBest fitness by epoch:")
    for entry in observer.history[::10]:
        print(f"  Epoch {entry['epoch']:3d}: {entry['best_fitness']:.6f}")


def multi_objective():
    """Example: approximate the ZDT1 Pareto front."""
    print("\n" + "=" * 80)
    print("TWO-OBJECTIVE SEARCH")
    print("=" * 80)

    problem = zdt1_like(variables=6)
    environment = Environment(
        population_size=60,
        selection_method=SelectionMethod.multi_objective(),
        mutation_rate=0.2,
        random_source=RandomSource(7),
        sense=OptimizationSense.MINIMIZE,
        parameters={"mutation_size": 0.05, "mutation_type": "gaussian"},
    )

    population = problem.create_population(environment)
    GeneticAlgorithm(problem.evaluator, config=EvolutionConfig(max_epochs=50)).evolve(population)

    front = sorted(population.get_pareto_front(), key=lambda org: org.objectives)
    print(f"\nPareto front size: {len(front)}")
    for organism in front[:10]:
        f1, f2 = organism.objectives
        print(f"  f1={f1:.4f}  f2={f2:.4f}")


if __name__ == "__main__":
    main()

    # Optionally run the two-objective search
    # multi_objective()
