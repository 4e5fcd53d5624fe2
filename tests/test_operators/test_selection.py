"""Tests for parent selection strategies."""

import pytest

from evoforge.evolution.environment import OptimizationSense
from evoforge.exceptions import ConfigurationError, EvolutionFailed
from evoforge.operators.selection import (
    crowded_binary_tournament,
    elites_from_population,
    organism_from_roulette,
    organism_from_tournament,
    organism_from_truncation,
    sort_by_fitness,
)
from evoforge.random_source import RandomSource


class TestSorting:
    def test_sort_ascending_when_maximizing(self, env, make_organisms):
        organisms = make_organisms([3.0, 1.0, 2.0])
        sort_by_fitness(organisms, env)
        assert [org.fitness for org in organisms] == [1.0, 2.0, 3.0]

    def test_best_last_when_minimizing(self, make_env, make_organisms):
        env = make_env(sense=OptimizationSense.MINIMIZE)
        organisms = make_organisms([3.0, 1.0, 2.0])
        sort_by_fitness(organisms, env)
        assert [org.fitness for org in organisms] == [3.0, 2.0, 1.0]


class TestRoulette:
    """Test fitness-proportional selection."""

    def test_only_positive_weight_is_chosen(self, env, make_organisms):
        organisms = make_organisms([0.0, 0.0, 5.0])
        picks = {id(organism_from_roulette(organisms, env)) for _ in range(50)}
        assert picks == {id(organisms[2])}

    def test_zero_total_falls_back_to_uniform(self, env, make_organisms):
        organisms = make_organisms([0.0, 0.0, 0.0, 0.0])
        picks = {id(organism_from_roulette(organisms, env)) for _ in range(200)}
        assert len(picks) > 1

    def test_proportional_frequencies(self, env, make_organisms):
        organisms = make_organisms([1.0, 3.0])
        picks = [organism_from_roulette(organisms, env) for _ in range(4000)]
        share = sum(1 for p in picks if p is organisms[1]) / len(picks)
        assert share == pytest.approx(0.75, abs=0.03)

    def test_minimize_weights_by_distance_from_worst(self, make_env, make_organisms):
        env = make_env(sense=OptimizationSense.MINIMIZE)
        organisms = make_organisms([5.0, 1.0])
        picks = {id(organism_from_roulette(organisms, env)) for _ in range(50)}
        assert picks == {id(organisms[1])}

    def test_empty_population(self, env):
        with pytest.raises(EvolutionFailed):
            organism_from_roulette([], env)


class TestTournament:
    """Test tournament selection."""

    def test_restricted_to_selectable_top(self, make_env, make_organisms):
        env = make_env(selectable_proportion=0.3)
        organisms = make_organisms([float(i) for i in range(10)])
        for _ in range(100):
            winner = organism_from_tournament(organisms, 2, env)
            assert organisms.index(winner) >= 7

    def test_large_tournament_finds_best(self, env, make_organisms):
        organisms = make_organisms([float(i) for i in range(5)])
        winners = [organism_from_tournament(organisms, 50, env) for _ in range(20)]
        assert all(w is organisms[-1] for w in winners)

    def test_zero_selectable_raises(self, make_env, make_organisms):
        env = make_env(selectable_proportion=0.05)
        organisms = make_organisms([1.0, 2.0, 3.0])
        with pytest.raises(ConfigurationError):
            organism_from_tournament(organisms, 2, env)

    def test_empty_population(self, env):
        with pytest.raises(EvolutionFailed):
            organism_from_tournament([], 2, env)


class TestTruncation:
    """Test deterministic truncation selection."""

    def test_cycles_through_top_fraction(self, make_organisms):
        organisms = make_organisms([float(i) for i in range(10)])
        picks = [organisms.index(organism_from_truncation(organisms, 0.25, k)) for k in range(5)]
        assert picks == [9, 8, 7, 9, 8]

    def test_at_least_one(self, make_organisms):
        organisms = make_organisms([1.0, 2.0, 3.0])
        picks = {organisms.index(organism_from_truncation(organisms, 0.01, k)) for k in range(5)}
        assert picks == {2}

    def test_invalid_fraction(self, make_organisms):
        with pytest.raises(ConfigurationError):
            organism_from_truncation(make_organisms([1.0]), 0.0, 0)


class TestElites:
    """Test elite extraction."""

    def test_top_organisms_replicated(self, make_env, make_organisms):
        env = make_env(number_of_elites=2, number_of_elite_copies=2)
        organisms = make_organisms([1.0, 2.0, 3.0, 4.0])

        elites = elites_from_population(organisms, env)

        assert sorted(e.fitness for e in elites) == [3.0, 3.0, 4.0, 4.0]
        assert all(e not in organisms for e in elites)

    def test_elites_are_independent_clones(self, make_env, make_organisms):
        env = make_env(number_of_elites=2, number_of_elite_copies=1)
        organisms = make_organisms([1.0, 2.0])

        elites = elites_from_population(organisms, env)

        assert elites[-1].genotype == organisms[-1].genotype
        assert elites[-1].genotype is not organisms[-1].genotype
        assert elites[-1].id != organisms[-1].id

    def test_odd_product_raises(self, make_env, make_organisms):
        env = make_env(number_of_elites=1, number_of_elite_copies=3)
        with pytest.raises(ConfigurationError):
            elites_from_population(make_organisms([1.0, 2.0]), env)

    def test_no_elites(self, make_env, make_organisms):
        env = make_env(number_of_elites=0, number_of_elite_copies=1)
        assert elites_from_population(make_organisms([1.0, 2.0]), env) == []


class TestCrowdedTournament:
    def test_lower_rank_wins(self, make_organisms):
        organisms = make_organisms([1.0, 1.0])
        organisms[0].dominance_rank = 1
        organisms[1].dominance_rank = 0
        rng = RandomSource(3)
        picks = [crowded_binary_tournament(organisms, rng) for _ in range(50)]
        # Only a draw of the worse organism twice can return it
        assert sum(1 for p in picks if p is organisms[1]) > 25

    def test_larger_crowding_wins_on_equal_rank(self, make_organisms):
        organisms = make_organisms([1.0, 1.0])
        organisms[0].crowding_distance = float("inf")
        organisms[1].crowding_distance = 0.5
        rng = RandomSource(3)
        picks = [crowded_binary_tournament(organisms, rng) for _ in range(50)]
        assert sum(1 for p in picks if p is organisms[0]) > 25
