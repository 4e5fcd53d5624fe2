"""Built-in demonstration problems.

- symbolic-regression: fit ``x**2 + x + 1`` with an arithmetic tree (maximize)
- ordering: shortest closed tour through cities on a circle (minimize)
- zdt1-like: two conflicting objectives over a real vector (minimize, Pareto)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np

from evoforge.engine.evaluator import FitnessEvaluator, FunctionEvaluator
from evoforge.evolution.environment import Environment, OptimizationSense
from evoforge.evolution.population import EvolutionType, Population
from evoforge.expression.compiler import evaluate_tree
from evoforge.expression.tree import TreeGenome
from evoforge.expression.types import ArithmeticGene, TreeTemplate
from evoforge.genomes.permutation import PermutationGenome
from evoforge.genomes.primitives import ContinuousGene, continuous_values
from evoforge.genomes.sequence import SequenceGenome


@dataclass
class Problem:
    """A ready-to-run optimization problem.

    Attributes:
        name: Registry name
        description: One-line summary
        evolution_type: Standard or multi-objective evolution
        sense: Optimization direction of the fitness/objectives
        genesis: Builds one random genome from an environment
        evaluator: Fitness (and objectives) evaluator
        describe: Renders a genome for reports
    """

    name: str
    description: str
    evolution_type: EvolutionType
    sense: OptimizationSense
    genesis: Callable[[Environment], Any]
    evaluator: FitnessEvaluator
    describe: Callable[[Any], str] = field(default=repr)

    def create_population(self, environment: Environment) -> Population:
        """Build an unevaluated population of ``environment.population_size`` genomes."""
        population = Population(environment=environment, evolution_type=self.evolution_type)
        for _ in range(environment.population_size):
            population.add_genome(self.genesis(environment))
        return population


# Symbolic regression

REGRESSION_X = np.linspace(-1.0, 1.0, 21)


def regression_target(x: np.ndarray) -> np.ndarray:
    return x ** 2 + x + 1.0


def regression_fitness(tree: TreeGenome) -> float:
    """1 / (1 + MSE) against the target curve."""
    predicted = evaluate_tree(tree, {"x": REGRESSION_X, "y": 0.0})
    mse = float(np.mean((predicted - regression_target(REGRESSION_X)) ** 2))
    return 1.0 / (1.0 + mse)


def symbolic_regression() -> Problem:
    template = TreeTemplate(
        binary_types=(ArithmeticGene.ADD, ArithmeticGene.SUB, ArithmeticGene.MUL, ArithmeticGene.DIV),
        unary_types=(ArithmeticGene.SIN, ArithmeticGene.COS, ArithmeticGene.NEG),
        leaf_types=(ArithmeticGene.X, ArithmeticGene.CONSTANT),
    )
    return Problem(
        name="symbolic-regression",
        description="Fit x^2 + x + 1 on [-1, 1] with an arithmetic expression tree",
        evolution_type=EvolutionType.STANDARD,
        sense=OptimizationSense.MAXIMIZE,
        genesis=lambda env: TreeGenome.random(1, template, env),
        evaluator=FunctionEvaluator(regression_fitness),
        describe=lambda tree: tree.to_string(),
    )


# Ordering

def circle_cities(count: int) -> np.ndarray:
    angles = np.linspace(0.0, 2.0 * math.pi, count, endpoint=False)
    return np.stack([np.cos(angles), np.sin(angles)], axis=1)


def tour_length(order: list[int], cities: np.ndarray) -> float:
    """Length of the closed tour visiting ``cities`` in ``order``."""
    path = cities[np.asarray(order)]
    steps = path - np.roll(path, -1, axis=0)
    return float(np.sum(np.linalg.norm(steps, axis=1)))


def ordering(city_count: int = 12) -> Problem:
    cities = circle_cities(city_count)

    def genesis(env: Environment) -> PermutationGenome:
        return PermutationGenome(env.random_source.shuffle(list(range(city_count))))

    return Problem(
        name="ordering",
        description=f"Shortest closed tour through {city_count} cities on a unit circle",
        evolution_type=EvolutionType.STANDARD,
        sense=OptimizationSense.MINIMIZE,
        genesis=genesis,
        evaluator=FunctionEvaluator(lambda genome: tour_length(genome.elements, cities)),
        describe=lambda genome: " ".join(str(e) for e in genome.elements),
    )


# Two-objective sequence problem

def zdt1_objectives(genome: SequenceGenome) -> list[float]:
    """ZDT1 objectives with every variable clipped into [0, 1]."""
    x = np.clip(np.asarray(continuous_values(genome.genes), dtype=float), 0.0, 1.0)
    f1 = float(x[0])
    g = 1.0 + 9.0 * float(np.mean(x[1:])) if len(x) > 1 else 1.0
    f2 = g * (1.0 - math.sqrt(f1 / g))
    return [f1, f2]


def zdt1_like(variables: int = 5) -> Problem:
    def genesis(env: Environment) -> SequenceGenome:
        rng = env.random_source
        return SequenceGenome([ContinuousGene(rng.uniform()) for _ in range(variables)])

    return Problem(
        name="zdt1-like",
        description=f"Two-objective ZDT1 over {variables} real variables",
        evolution_type=EvolutionType.MULTI_OBJECTIVE,
        sense=OptimizationSense.MINIMIZE,
        genesis=genesis,
        evaluator=FunctionEvaluator(lambda genome: zdt1_objectives(genome)[0], zdt1_objectives),
        describe=lambda genome: ", ".join(f"{v:.3f}" for v in continuous_values(genome.genes)),
    )


PROBLEMS: dict[str, Callable[[], Problem]] = {
    "symbolic-regression": symbolic_regression,
    "ordering": ordering,
    "zdt1-like": zdt1_like,
}


def get_problem(name: str) -> Problem:
    """Instantiate a registered problem by name."""
    if name not in PROBLEMS:
        raise KeyError(f"Unknown problem: {name}. Available: {sorted(PROBLEMS)}")
    return PROBLEMS[name]()
