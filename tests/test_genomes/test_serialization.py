"""Tests for dictionary and JSON forms of flat genomes and organisms."""

import json

import pytest

from evoforge.evolution.organism import Organism
from evoforge.exceptions import ConfigurationError
from evoforge.genomes.permutation import PermutationGenome
from evoforge.genomes.primitives import ContinuousGene, DiscreteChoiceGene, gene_from_dict
from evoforge.genomes.sequence import SequenceGenome


def through_json(data):
    return json.loads(json.dumps(data))


class TestGenes:
    def test_continuous(self):
        gene = ContinuousGene(0.1 + 0.2)
        restored = gene_from_dict(through_json(gene.to_dict()))
        assert isinstance(restored, ContinuousGene)
        assert restored == gene

    def test_choice(self):
        gene = DiscreteChoiceGene("b", ["a", "b", "c"])
        restored = gene_from_dict(through_json(gene.to_dict()))
        assert restored == gene
        assert restored.choices == ("a", "b", "c")

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            gene_from_dict({"type": "quantum", "value": 1})


class TestSequenceGenome:
    def test_mixed_genes_round_trip(self):
        genome = SequenceGenome(
            [ContinuousGene(-1.5), DiscreteChoiceGene(2, [1, 2, 3]), ContinuousGene(4.0)],
            individual_mutation_rate=0.3,
        )
        restored = SequenceGenome.from_dict(through_json(genome.to_dict()))
        assert restored == genome
        assert restored.individual_mutation_rate == 0.3
        assert restored.individual_crossover_rate is None

    def test_custom_gene_decoder(self):
        data = {"genes": [{"type": "continuous", "value": 2.0}]}
        restored = SequenceGenome.from_dict(data, lambda g: ContinuousGene(g["value"] * 2))
        assert restored.genes == [ContinuousGene(4.0)]


class TestPermutationGenome:
    def test_round_trip(self):
        genome = PermutationGenome([3, 0, 2, 1], individual_crossover_rate=0.9)
        restored = PermutationGenome.from_dict(through_json(genome.to_dict()))
        assert restored == genome
        assert restored.individual_crossover_rate == 0.9

    def test_duplicates_rejected_on_load(self):
        with pytest.raises(ConfigurationError):
            PermutationGenome.from_dict({"elements": [0, 1, 1]})


class TestOrganism:
    def test_round_trip(self):
        organism = Organism(
            genotype=PermutationGenome([1, 0, 2]),
            fitness=-3.5,
            objectives=[0.2, 0.8],
            birth_generation=4,
            dominance_rank=1,
            crowding_distance=0.75,
        )
        restored = Organism.from_dict(
            through_json(organism.to_dict()), PermutationGenome.from_dict
        )
        assert restored.id == organism.id
        assert restored.genotype == organism.genotype
        assert restored.fitness == -3.5
        assert restored.objectives == [0.2, 0.8]
        assert restored.birth_generation == 4
        assert restored.dominance_rank == 1
        assert restored.crowding_distance == 0.75

    def test_unevaluated(self, make_organisms):
        organism = make_organisms([1.0])[0]
        organism.fitness = None
        restored = Organism.from_dict(organism.to_dict(), SequenceGenome.from_dict)
        assert restored.fitness is None
        assert restored.objectives is None
        assert not restored.has_result(False)
