"""Tests for population epochs and metrics."""

import pytest

from evoforge.evolution.environment import OptimizationSense, SelectionMethod
from evoforge.evolution.organism import Organism
from evoforge.evolution.population import EvolutionType, Population
from evoforge.exceptions import ConfigurationError, EvolutionFailed
from evoforge.genomes.primitives import ContinuousGene
from evoforge.genomes.sequence import SequenceGenome


class RateRecordingGenome:
    """Genome that records the rates the epoch hands it."""

    def __init__(self, value, log, individual_mutation_rate=None, individual_crossover_rate=None):
        self.value = value
        self.log = log
        self.individual_mutation_rate = individual_mutation_rate
        self.individual_crossover_rate = individual_crossover_rate

    def mutate(self, rate, environment):
        self.log.append(("mutate", rate))

    def crossover(self, partner, rate, environment):
        self.log.append(("crossover", rate))
        return self, partner

    def copy(self):
        return RateRecordingGenome(
            self.value, self.log, self.individual_mutation_rate, self.individual_crossover_rate
        )

    def __eq__(self, other):
        return isinstance(other, RateRecordingGenome) and self.value == other.value

    def __hash__(self):
        return hash(self.value)


def evaluated_population(env, size=None, evolution_type=EvolutionType.STANDARD):
    """Population of sequence genomes with fitness = sum of values."""
    population = Population(environment=env, evolution_type=evolution_type)
    rng = env.random_source
    for _ in range(size or env.population_size):
        genome = SequenceGenome([ContinuousGene(rng.uniform()) for _ in range(3)])
        organism = population.add_genome(genome)
        values = [g.value for g in genome.genes]
        organism.fitness = sum(values)
        if evolution_type is EvolutionType.MULTI_OBJECTIVE:
            organism.objectives = [values[0], 1.0 - values[0] + values[1]]
    return population


def assign_fitness(population):
    for organism in population:
        if organism.fitness is None:
            organism.fitness = sum(g.value for g in organism.genotype.genes)


class TestStandardEpoch:
    """Test the standard generation transition."""

    @pytest.mark.parametrize(
        "method",
        [
            SelectionMethod.roulette(),
            SelectionMethod.tournament(3),
            SelectionMethod.truncation(0.5),
        ],
    )
    def test_population_size_invariant(self, make_env, method):
        env = make_env(population_size=12, selection_method=method, mutation_rate=0.5)
        population = evaluated_population(env)

        for _ in range(5):
            population.epoch()
            assert len(population) == 12
            assert population.needs_evaluation()
            assign_fitness(population)

    def test_odd_population_size_trimmed(self, make_env):
        env = make_env(population_size=7)
        population = evaluated_population(env)
        population.epoch()
        assert len(population) == 7

    def test_generation_counter_and_birth_stamp(self, make_env):
        env = make_env(number_of_elites=0, number_of_elite_copies=0)
        population = evaluated_population(env)
        population.epoch()

        assert population.generation == 1
        assert all(org.birth_generation == 1 for org in population)

    def test_elites_carried_over(self, make_env):
        env = make_env(number_of_elites=2, number_of_elite_copies=1, mutation_rate=1.0)
        population = evaluated_population(env)
        best = max(population, key=lambda org: org.fitness)

        population.epoch()

        assert any(org.genotype == best.genotype and org.fitness == best.fitness for org in population)

    def test_children_do_not_share_parent_genomes(self, make_env):
        env = make_env(crossover_rate=0.0)
        population = evaluated_population(env)
        old_genomes = {id(org.genotype) for org in population}

        population.epoch()

        assert not old_genomes & {id(org.genotype) for org in population}

    def test_individual_rate_overrides(self, make_env):
        env = make_env(mutation_rate=0.05, crossover_rate=0.8, number_of_elites=0)
        log = []
        population = Population(environment=env)
        for i in range(10):
            organism = population.add_genome(
                RateRecordingGenome(i, log, individual_mutation_rate=0.7, individual_crossover_rate=0.3)
            )
            organism.fitness = float(i)

        population.epoch()

        crossover_rates = {rate for kind, rate in log if kind == "crossover"}
        mutation_rates = {rate for kind, rate in log if kind == "mutate"}
        assert crossover_rates == {0.3}
        assert mutation_rates == {0.7}

    def test_environment_rates_without_overrides(self, make_env):
        env = make_env(mutation_rate=0.05, crossover_rate=0.8, number_of_elites=0)
        log = []
        population = Population(environment=env)
        for i in range(10):
            population.add_genome(RateRecordingGenome(i, log)).fitness = float(i)

        population.epoch()

        assert {rate for kind, rate in log if kind == "crossover"} == {0.8}
        assert {rate for kind, rate in log if kind == "mutate"} == {0.05}


class TestEpochErrors:
    """Configuration errors abort the epoch."""

    def test_empty_population(self, env):
        with pytest.raises(EvolutionFailed):
            Population(environment=env).epoch()

    def test_unevaluated_population(self, env):
        population = Population(environment=env)
        population.add_genome(SequenceGenome([ContinuousGene(1.0)]))
        with pytest.raises(EvolutionFailed):
            population.epoch()

    def test_odd_elite_product(self, make_env):
        env = make_env(number_of_elites=3, number_of_elite_copies=1)
        population = evaluated_population(env)
        with pytest.raises(ConfigurationError):
            population.epoch()

    def test_zero_selectable(self, make_env):
        env = make_env(selectable_proportion=0.0)
        population = evaluated_population(env)
        with pytest.raises(ConfigurationError):
            population.epoch()

    def test_multi_objective_selection_on_standard_population(self, make_env):
        env = make_env(selection_method=SelectionMethod.multi_objective())
        population = evaluated_population(env)
        with pytest.raises(ConfigurationError):
            population.epoch()


class TestMultiObjectiveEpoch:
    """Multi-objective epochs expand, truncation shrinks back."""

    def test_expand_then_truncate(self, make_env):
        env = make_env(population_size=10, sense=OptimizationSense.MINIMIZE)
        population = evaluated_population(env, evolution_type=EvolutionType.MULTI_OBJECTIVE)
        population.truncate_multi_objective()

        population.epoch()
        assert len(population) == 20

        for organism in population:
            if organism.objectives is None:
                values = [g.value for g in organism.genotype.genes]
                organism.fitness = values[0]
                organism.objectives = [values[0], 1.0 - values[0] + values[1]]

        population.truncate_multi_objective()
        assert len(population) == 10
        assert population.get_pareto_front()


class TestMetrics:
    """Test fitness metrics and statistics."""

    def test_metrics_maximize(self, env):
        population = Population(environment=env)
        for fitness in [1.0, 5.0, 3.0]:
            population.add_genome(SequenceGenome([ContinuousGene(fitness)])).fitness = fitness

        population.update_fitness_metrics()

        assert population.total_fitness == 9.0
        assert population.average_fitness == 3.0
        assert population.best_organism_in_generation.fitness == 5.0
        assert population.best_organism.fitness == 5.0

    def test_metrics_minimize(self, make_env):
        env = make_env(sense=OptimizationSense.MINIMIZE)
        population = Population(environment=env)
        for fitness in [4.0, 2.0, 3.0]:
            population.add_genome(SequenceGenome([ContinuousGene(fitness)])).fitness = fitness

        population.update_fitness_metrics()
        assert population.best_organism.fitness == 2.0

    def test_best_organism_is_all_time_best(self, env):
        population = Population(environment=env)
        population.organisms = [Organism(SequenceGenome([ContinuousGene(1.0)]), fitness=10.0)]
        population.update_fitness_metrics()
        population.organisms = [Organism(SequenceGenome([ContinuousGene(2.0)]), fitness=4.0)]
        population.update_fitness_metrics()

        assert population.best_organism_in_generation.fitness == 4.0
        assert population.best_organism.fitness == 10.0

    def test_compute_stats(self, env):
        population = evaluated_population(env, size=6)
        stats = population.compute_stats()

        assert stats.size == 6
        assert stats.evaluated == 6
        assert stats.unique_genomes == 6
        assert stats.best_fitness == max(org.fitness for org in population)
