"""
Expression Evaluation
=====================

Lowers a closed ΔQ expression to a single
:class:`~pysatl_deltaq.distributions.cdf.CDF`.

Evaluation is a bottom-up fold over the tree (:func:`.delta_q.fold`), left
before right, so arbitrarily deep expressions are fine; the first error aborts
it. Names are never looked up here: substitute them first,
e.g. with :meth:`pysatl_deltaq.expressions.context.EvaluationContext.resolve`.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING

from pysatl_deltaq.errors import UnresolvedNameError, ZeroWeightError
from pysatl_deltaq.expressions.delta_q import (
    BlackBox,
    Choice,
    ForAll,
    ForSome,
    Literal,
    Name,
    Seq,
    fold,
)

if TYPE_CHECKING:
    from pysatl_deltaq.distributions.cdf import CDF
    from pysatl_deltaq.expressions.delta_q import DeltaQ


def choice_fraction(first_weight: float, second_weight: float) -> float:
    """
    Normalize two choice weights into the probability of the first branch.

    Raises
    ------
    ZeroWeightError
        If the weights sum to zero.
    """
    total = float(first_weight) + float(second_weight)
    if total == 0.0:
        raise ZeroWeightError(
            f"Choice weights {first_weight} and {second_weight} sum to zero"
        )
    return float(first_weight) / total


def evaluate(expr: DeltaQ) -> CDF:
    """
    Evaluate a closed expression.

    Parameters
    ----------
    expr : DeltaQ
        Expression without names or black boxes.

    Returns
    -------
    CDF
        The completion-time distribution described by ``expr``.

    Raises
    ------
    UnresolvedNameError
        If a :class:`Name` or :class:`BlackBox` is reached.
    ZeroWeightError
        If a choice has weights summing to zero.
    IncompatibleError
        If two operands differ in bin size or length.
    InvalidRangeError
        If a choice yields a fraction outside ``[0, 1]`` (negative weights).
    """
    return fold(expr, _evaluate_node)


def _evaluate_node(node: DeltaQ, operands: tuple[CDF, ...]) -> CDF:
    match node:
        case Literal(cdf):
            return cdf
        case Name(identifier):
            raise UnresolvedNameError(f"Cannot evaluate a name: {identifier}", identifier)
        case BlackBox():
            raise UnresolvedNameError("Cannot evaluate a black box")
        case Seq():
            first, second = operands
            return first.sequence(second)
        case Choice(_, first_weight, _, second_weight):
            first, second = operands
            return first.mixture(choice_fraction(first_weight, second_weight), second)
        case ForAll():
            first, second = operands
            return first.both(second)
        case ForSome():
            first, second = operands
            return first.either(second)
        case _:
            raise TypeError(f"Not a ΔQ expression: {node!r}")


__all__ = [
    "evaluate",
    "choice_fraction",
]
