"""Tests for Pareto dominance, fronts and crowding distance."""

import math

import pytest

from evoforge.evolution.environment import OptimizationSense
from evoforge.exceptions import ConfigurationError
from evoforge.operators.nsga2 import (
    assign_crowding_distance,
    dominates,
    fast_non_dominated_sort,
    sort_and_truncate,
)

FRONT_POINTS = [(10, 2), (5, 5), (2, 10), (4, 4), (1, 1)]


@pytest.fixture
def front_organisms(make_organisms):
    return make_organisms([p[0] for p in FRONT_POINTS], objectives=FRONT_POINTS)


class TestDominance:
    """Test the dominance relation."""

    def test_irreflexive(self, make_organisms):
        (a,) = make_organisms([1.0], objectives=[(1.0, 2.0)])
        assert not dominates(a, a)

    def test_asymmetric(self, front_organisms):
        for p in front_organisms:
            for q in front_organisms:
                if dominates(p, q):
                    assert not dominates(q, p)

    def test_minimization_default(self, make_organisms):
        a, b = make_organisms([0, 0], objectives=[(1, 1), (2, 1)])
        assert dominates(a, b)
        assert not dominates(b, a)

    def test_maximization(self, make_organisms):
        a, b = make_organisms([0, 0], objectives=[(1, 1), (2, 1)])
        assert dominates(b, a, OptimizationSense.MAXIMIZE)

    def test_equal_vectors_do_not_dominate(self, make_organisms):
        a, b = make_organisms([0, 0], objectives=[(3, 3), (3, 3)])
        assert not dominates(a, b)
        assert not dominates(b, a)

    def test_falls_back_to_fitness(self, make_organisms):
        a, b = make_organisms([1.0, 2.0])
        assert dominates(a, b)
        assert dominates(b, a, OptimizationSense.MAXIMIZE)


class TestNonDominatedSort:
    """Test front construction."""

    def test_fronts_when_maximizing(self, front_organisms):
        fronts = fast_non_dominated_sort(front_organisms, OptimizationSense.MAXIMIZE)
        assert [set(f) for f in fronts] == [{0, 1, 2}, {3}, {4}]

    def test_fronts_when_minimizing(self, front_organisms):
        fronts = fast_non_dominated_sort(front_organisms, OptimizationSense.MINIMIZE)
        assert [set(f) for f in fronts] == [{4}, {0, 2, 3}, {1}]

    def test_every_organism_in_exactly_one_front(self, make_organisms, env):
        rng = env.random_source
        points = [(rng.uniform(), rng.uniform(), rng.uniform()) for _ in range(40)]
        organisms = make_organisms([0.0] * 40, objectives=points)

        fronts = fast_non_dominated_sort(organisms)

        flat = [i for front in fronts for i in front]
        assert sorted(flat) == list(range(40))

    def test_no_member_dominated_within_front(self, make_organisms, env):
        rng = env.random_source
        points = [(rng.uniform(), rng.uniform()) for _ in range(30)]
        organisms = make_organisms([0.0] * 30, objectives=points)

        for front in fast_non_dominated_sort(organisms):
            for i in front:
                for j in front:
                    assert not dominates(organisms[i], organisms[j])

    def test_empty(self):
        assert fast_non_dominated_sort([]) == []


class TestCrowdingDistance:
    """Test crowding-distance assignment."""

    def test_boundaries_infinite(self, make_organisms):
        front = make_organisms([0, 0, 0, 0], objectives=[(1, 5), (2, 3), (3, 2), (4, 1)])
        assign_crowding_distance(front)
        assert math.isinf(front[0].crowding_distance)
        assert math.isinf(front[3].crowding_distance)
        assert math.isfinite(front[1].crowding_distance)
        assert math.isfinite(front[2].crowding_distance)

    def test_interior_value(self, make_organisms):
        front = make_organisms([0, 0, 0], objectives=[(1, 5), (2, 3), (4, 1)])
        assign_crowding_distance(front)
        # (4 - 1) / 3 + (5 - 1) / 4
        assert front[1].crowding_distance == pytest.approx(2.0)

    def test_zero_range_objective_skipped(self, make_organisms):
        front = make_organisms([0, 0, 0], objectives=[(1, 7), (2, 7), (3, 7)])
        assign_crowding_distance(front)
        assert front[1].crowding_distance == pytest.approx(1.0)

    def test_does_not_reorder_front(self, make_organisms):
        front = make_organisms([0, 0, 0], objectives=[(3, 1), (1, 3), (2, 2)])
        ids = [org.id for org in front]
        assign_crowding_distance(front)
        assert [org.id for org in front] == ids


class TestSortAndTruncate:
    """Test survival selection."""

    def test_truncates_to_n(self, front_organisms):
        survivors = sort_and_truncate(front_organisms, 3, OptimizationSense.MINIMIZE)
        assert len(survivors) == 3
        assert survivors[0] is front_organisms[4]
        assert survivors[0].dominance_rank == 0

    def test_partial_front_prefers_boundaries(self, make_organisms):
        organisms = make_organisms(
            [0] * 5, objectives=[(1, 5), (2, 4), (3, 3), (4, 2), (5, 1)]
        )
        survivors = sort_and_truncate(organisms, 2)
        assert {org.id for org in survivors} == {organisms[0].id, organisms[4].id}

    def test_ranks_assigned(self, front_organisms):
        sort_and_truncate(front_organisms, 5, OptimizationSense.MINIMIZE)
        assert [org.dominance_rank for org in front_organisms] == [1, 2, 1, 1, 0]

    def test_n_larger_than_population(self, front_organisms):
        assert len(sort_and_truncate(front_organisms, 50)) == 5

    def test_negative_n_raises(self, front_organisms):
        with pytest.raises(ConfigurationError):
            sort_and_truncate(front_organisms, -1)
