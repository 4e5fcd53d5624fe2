"""Vectorized interpreter for arithmetic expression trees.

Evaluates a ``TreeGenome`` over ``ArithmeticGene`` against numpy arrays in
one reverse pass over the prefix array: leaves push their values, operators
pop their children. Division is protected and non-finite results are
clipped so fitness functions always see finite numbers.
"""

from __future__ import annotations

from typing import Callable, Mapping

import numpy as np

from evoforge.expression.tree import TreeGenome
from evoforge.expression.types import ArithmeticGene

# Results are clipped into [-BOUND, BOUND]
BOUND = 1e12


def _protected_div(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    safe = np.abs(y) > 1e-12
    return np.where(safe, x / np.where(safe, y, 1.0), 1.0)


OPERATORS: dict[ArithmeticGene, Callable[..., np.ndarray]] = {
    # Binary arithmetic
    ArithmeticGene.ADD: lambda x, y: x + y,
    ArithmeticGene.SUB: lambda x, y: x - y,
    ArithmeticGene.MUL: lambda x, y: x * y,
    ArithmeticGene.DIV: _protected_div,

    # Unary
    ArithmeticGene.SIN: np.sin,
    ArithmeticGene.COS: np.cos,
    ArithmeticGene.NEG: lambda x: -x,
}


def _finalize(values: np.ndarray) -> np.ndarray:
    return np.clip(np.nan_to_num(values, nan=0.0, posinf=BOUND, neginf=-BOUND), -BOUND, BOUND)


def evaluate_tree(tree: TreeGenome, variables: Mapping[str, np.ndarray | float]) -> np.ndarray:
    """Evaluate an arithmetic tree element-wise.

    Args:
        tree: Tree over ``ArithmeticGene``
        variables: Values for ``x`` and ``y`` (arrays or scalars)

    Returns:
        Array of results, broadcast over the inputs
    """
    x = np.asarray(variables.get("x", 0.0), dtype=float)
    y = np.asarray(variables.get("y", 0.0), dtype=float)
    shape = np.broadcast(x, y).shape

    stack: list[np.ndarray] = []
    with np.errstate(all="ignore"):
        for node in reversed(tree.nodes):
            gene_type = node.gene_type
            if gene_type is ArithmeticGene.X:
                stack.append(np.broadcast_to(x, shape))
            elif gene_type is ArithmeticGene.Y:
                stack.append(np.broadcast_to(y, shape))
            elif gene_type is ArithmeticGene.CONSTANT:
                stack.append(np.full(shape, node.coefficient or 0.0))
            else:
                op_func = OPERATORS.get(gene_type)
                if op_func is None:
                    raise ValueError(f"Unknown operator: {gene_type}")
                # Children were pushed last-first, so the first child is on top
                args = [stack.pop() for _ in range(gene_type.child_count)]
                stack.append(_finalize(op_func(*args)))

    if len(stack) != 1:
        raise ValueError(f"Malformed tree: {len(stack)} values left after evaluation")
    return _finalize(np.asarray(stack[0], dtype=float))
