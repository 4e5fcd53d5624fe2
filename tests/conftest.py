"""
Pytest fixtures for evoforge tests.

Every environment is seeded so that runs are reproducible.
"""

import pytest

from evoforge.evolution.environment import Environment, SelectionMethod
from evoforge.evolution.organism import Organism
from evoforge.expression.tree import TreeGenome
from evoforge.expression.types import TreeGeneType, TreeTemplate
from evoforge.genomes.primitives import ContinuousGene
from evoforge.genomes.sequence import SequenceGenome
from evoforge.random_source import RandomSource


class MockGeneType(TreeGeneType):
    """Minimal catalog: one type per arity class."""

    TERMINAL = 0
    UNARY = 1
    BINARY = 2

    @property
    def child_count(self) -> int:
        return self.value


@pytest.fixture
def make_env():
    """Factory for seeded environments; keyword arguments override defaults."""

    def _make(seed: int = 42, **overrides) -> Environment:
        overrides.setdefault("population_size", 10)
        overrides.setdefault("selection_method", SelectionMethod.tournament(3))
        return Environment(random_source=RandomSource(seed), **overrides)

    return _make


@pytest.fixture
def env(make_env) -> Environment:
    return make_env()


@pytest.fixture
def gene_type():
    return MockGeneType


@pytest.fixture
def mock_template() -> TreeTemplate:
    return TreeTemplate.from_gene_type(MockGeneType)


@pytest.fixture
def make_tree(mock_template):
    """Build a mock tree from gene-type names in prefix order."""

    def _make(*names: str, template: TreeTemplate | None = None) -> TreeGenome:
        types = [MockGeneType[name] for name in names]
        return TreeGenome.from_types(types, template or mock_template)

    return _make


@pytest.fixture
def make_organisms():
    """Evaluated organisms over one-gene sequence genomes, one per fitness."""

    def _make(fitnesses, objectives=None) -> list[Organism]:
        organisms = []
        for i, fitness in enumerate(fitnesses):
            organisms.append(
                Organism(
                    genotype=SequenceGenome([ContinuousGene(float(i))]),
                    fitness=fitness,
                    objectives=list(objectives[i]) if objectives is not None else None,
                    birth_generation=0,
                )
            )
        return organisms

    return _make
