"""Gene-type catalogs for expression trees.

A tree gene type is an Enum whose members know their arity. Concrete
catalogs subclass ``TreeGeneType`` and implement ``child_count``; the
``TreeTemplate`` partitions a catalog into the binary, unary and leaf types
that structural mutation samples from.
"""

from dataclasses import dataclass
from enum import Enum

from evoforge.exceptions import ConfigurationError


class TreeGeneType(Enum):
    """Base class for node-type catalogs (no members of its own)."""

    @property
    def child_count(self) -> int:
        raise NotImplementedError

    @property
    def allows_coefficient(self) -> bool:
        """Whether nodes of this type carry a numeric coefficient."""
        return False

    @property
    def is_leaf_type(self) -> bool:
        return self.child_count == 0

    @property
    def is_unary_type(self) -> bool:
        return self.child_count == 1

    @property
    def is_binary_type(self) -> bool:
        return self.child_count == 2


class ArithmeticGene(TreeGeneType):
    """Arithmetic primitives over two input variables."""

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"      # protected: x / 0 -> 1
    SIN = "sin"
    COS = "cos"
    NEG = "neg"
    X = "x"
    Y = "y"
    CONSTANT = "constant"

    @property
    def child_count(self) -> int:
        return ARITHMETIC_ARITY[self]

    @property
    def allows_coefficient(self) -> bool:
        return self is ArithmeticGene.CONSTANT


ARITHMETIC_ARITY: dict[ArithmeticGene, int] = {
    ArithmeticGene.ADD: 2,
    ArithmeticGene.SUB: 2,
    ArithmeticGene.MUL: 2,
    ArithmeticGene.DIV: 2,
    ArithmeticGene.SIN: 1,
    ArithmeticGene.COS: 1,
    ArithmeticGene.NEG: 1,
    ArithmeticGene.X: 0,
    ArithmeticGene.Y: 0,
    ArithmeticGene.CONSTANT: 0,
}


@dataclass(frozen=True)
class TreeTemplate:
    """Type catalogs available to structural mutation and random genesis.

    Attributes:
        binary_types: Types with two children
        unary_types: Types with one child
        leaf_types: Types with no children
    """

    binary_types: tuple[TreeGeneType, ...]
    unary_types: tuple[TreeGeneType, ...]
    leaf_types: tuple[TreeGeneType, ...]

    def __post_init__(self) -> None:
        for name, expected in (("binary_types", 2), ("unary_types", 1), ("leaf_types", 0)):
            for gene_type in getattr(self, name):
                if gene_type.child_count != expected:
                    raise ValueError(
                        f"{gene_type} has {gene_type.child_count} children, "
                        f"cannot be listed in {name}"
                    )

    @property
    def non_leaf_types(self) -> tuple[TreeGeneType, ...]:
        return self.binary_types + self.unary_types

    def same_arity_types(self, gene_type: TreeGeneType) -> tuple[TreeGeneType, ...]:
        """Catalog sharing ``gene_type``'s arity class."""
        if gene_type.is_binary_type:
            return self.binary_types
        if gene_type.is_unary_type:
            return self.unary_types
        if gene_type.is_leaf_type:
            return self.leaf_types
        return ()

    def gene_type_named(self, name: str) -> TreeGeneType:
        """Find a catalog member by its enum name."""
        for gene_type in self.non_leaf_types + self.leaf_types:
            if gene_type.name == name:
                return gene_type
        raise ConfigurationError(f"Gene type {name!r} is not in this template")

    @classmethod
    def from_gene_type(cls, gene_type: type[TreeGeneType]) -> "TreeTemplate":
        """Build a template from every member of a catalog, split by arity."""
        members = list(gene_type)
        return cls(
            binary_types=tuple(m for m in members if m.child_count == 2),
            unary_types=tuple(m for m in members if m.child_count == 1),
            leaf_types=tuple(m for m in members if m.child_count == 0),
        )
