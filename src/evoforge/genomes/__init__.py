"""Flat genome encodings: primitive genes, sequences and permutations."""

from evoforge.genomes.primitives import ContinuousGene, DiscreteChoiceGene, gene_from_dict
from evoforge.genomes.sequence import SequenceGenome
from evoforge.genomes.permutation import PermutationGenome, order_crossover

__all__ = [
    "ContinuousGene",
    "DiscreteChoiceGene",
    "gene_from_dict",
    "SequenceGenome",
    "PermutationGenome",
    "order_crossover",
]
