"""
ΔQ Expressions
==============

Algebraic terms describing how outcomes compose:

- :class:`Name` — reference to an expression bound elsewhere;
- :class:`Literal` — an inline :class:`~pysatl_deltaq.distributions.cdf.CDF`;
- :class:`Seq` — one outcome, then the other;
- :class:`Choice` — one of two outcomes, picked with the given weights;
- :class:`ForAll` — both outcomes must occur;
- :class:`ForSome` — at least one outcome must occur;
- :class:`BlackBox` — a hole in an expression that is still being edited.

Expressions are immutable trees; builders wrap their arguments in a new node
and never validate them.

The string form uses the customary notation: ``A •->-• B`` for sequences,
``A 1⇌2 B`` for choices, ``∀(A | B)`` and ``∃(A | B)`` for the quantifiers.
Operands of sequences and choices are parenthesized when they are themselves
sequences or choices.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from pysatl_deltaq.distributions.cdf import CDF

SEQ_SYMBOL = "•->-•"
CHOICE_SYMBOL = "⇌"
FOR_ALL_SYMBOL = "∀"
FOR_SOME_SYMBOL = "∃"
BLACK_BOX_SYMBOL = "⊥"


class DeltaQNode:
    """Common behaviour of all expression variants."""

    __slots__ = ()

    def __str__(self) -> str:
        return display(self)  # type: ignore[arg-type]

    def eval(self) -> CDF:
        """
        Evaluate this expression to a distribution.

        See :func:`pysatl_deltaq.expressions.evaluation.evaluate`.
        """
        from pysatl_deltaq.expressions.evaluation import evaluate

        return evaluate(self)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class Name(DeltaQNode):
    """Reference to an expression bound under ``name``."""

    name: str


@dataclass(frozen=True, slots=True)
class Literal(DeltaQNode):
    """An inline distribution."""

    cdf: CDF


@dataclass(frozen=True, slots=True)
class Seq(DeltaQNode):
    """``first`` followed by ``second``."""

    first: DeltaQ
    second: DeltaQ


@dataclass(frozen=True, slots=True)
class Choice(DeltaQNode):
    """
    Probabilistic choice between two outcomes.

    Parameters
    ----------
    first, second : DeltaQ
        The alternatives.
    first_weight, second_weight : float
        Relative weights; ``first`` is taken with probability
        ``first_weight / (first_weight + second_weight)``.
    """

    first: DeltaQ
    first_weight: float
    second: DeltaQ
    second_weight: float


@dataclass(frozen=True, slots=True)
class ForAll(DeltaQNode):
    """Both outcomes must occur."""

    first: DeltaQ
    second: DeltaQ


@dataclass(frozen=True, slots=True)
class ForSome(DeltaQNode):
    """At least one of the outcomes must occur."""

    first: DeltaQ
    second: DeltaQ


@dataclass(frozen=True, slots=True)
class BlackBox(DeltaQNode):
    """Placeholder for a part of an expression that has not been written yet."""


type DeltaQ = Name | Literal | Seq | Choice | ForAll | ForSome | BlackBox
"""Any ΔQ expression."""


def name(identifier: str) -> Name:
    """Reference the expression bound under ``identifier``."""
    return Name(identifier)


def literal(cdf: CDF) -> Literal:
    """Wrap a distribution as an expression."""
    return Literal(cdf)


def sequence(first: DeltaQ, second: DeltaQ) -> Seq:
    """Sequential composition: ``first •->-• second``."""
    return Seq(first, second)


def choice(first: DeltaQ, first_weight: float, second: DeltaQ, second_weight: float) -> Choice:
    """Weighted choice between ``first`` and ``second``."""
    return Choice(first, first_weight, second, second_weight)


def for_all(first: DeltaQ, second: DeltaQ) -> ForAll:
    """Universal composition: both outcomes must occur."""
    return ForAll(first, second)


def for_some(first: DeltaQ, second: DeltaQ) -> ForSome:
    """Existential composition: at least one outcome must occur."""
    return ForSome(first, second)


def black_box() -> BlackBox:
    """A fresh placeholder."""
    return BlackBox()


def format_weight(weight: float) -> str:
    """
    Format a choice weight in its shortest positional form.

    Integral weights print without a fractional part (``1``, not ``1.0``) and
    small or large weights never switch to exponent notation
    (``0.0000001``, not ``1e-07``).
    """
    return np.format_float_positional(float(weight), trim="-")


def _infix(expr: DeltaQ) -> bool:
    return isinstance(expr, Seq | Choice)


def _display_node(node: DeltaQ, operands: tuple[str, ...]) -> str:
    match node:
        case Name(identifier):
            return identifier
        case Literal(cdf):
            return str(cdf)
        case BlackBox():
            return BLACK_BOX_SYMBOL
        case ForAll():
            return f"{FOR_ALL_SYMBOL}({operands[0]} | {operands[1]})"
        case ForSome():
            return f"{FOR_SOME_SYMBOL}({operands[0]} | {operands[1]})"

    first, second = (
        f"({text})" if _infix(child) else text
        for child, text in zip(children(node), operands, strict=True)
    )
    match node:
        case Seq():
            return f"{first} {SEQ_SYMBOL} {second}"
        case Choice(_, first_weight, _, second_weight):
            weights = f"{format_weight(first_weight)}{CHOICE_SYMBOL}{format_weight(second_weight)}"
            return f"{first} {weights} {second}"
    raise TypeError(f"Not a ΔQ expression: {node!r}")


def display(expr: DeltaQ, parens: bool = False) -> str:
    """
    Render ``expr`` in ΔQ notation.

    Parameters
    ----------
    expr : DeltaQ
        Expression to render.
    parens : bool, default False
        Wrap a top-level sequence or choice in parentheses.

    Returns
    -------
    str
        The rendered expression.
    """
    body = fold(expr, _display_node)
    return f"({body})" if parens and _infix(expr) else body


def children(expr: DeltaQ) -> tuple[DeltaQ, ...]:
    """Direct subexpressions of ``expr``, left to right."""
    match expr:
        case Seq(first, second) | ForAll(first, second) | ForSome(first, second):
            return (first, second)
        case Choice(first, _, second, _):
            return (first, second)
        case Name() | Literal() | BlackBox():
            return ()
        case _:
            raise TypeError(f"Not a ΔQ expression: {expr!r}")


def walk(expr: DeltaQ) -> Iterator[DeltaQ]:
    """Iterate all nodes of ``expr`` depth-first, left before right."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def postorder(expr: DeltaQ) -> Iterator[DeltaQ]:
    """Iterate all nodes of ``expr`` with every node after its subexpressions."""
    stack: list[tuple[DeltaQ, bool]] = [(expr, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(children(node)))


def fold[R](expr: DeltaQ, visit: Callable[[DeltaQ, tuple[R, ...]], R]) -> R:
    """
    Reduce ``expr`` bottom-up without recursion.

    Parameters
    ----------
    expr : DeltaQ
        Expression to reduce.
    visit : Callable[[DeltaQ, tuple[R, ...]], R]
        Called once per node, in :func:`postorder`, with the node and the
        results of its direct subexpressions, left to right.

    Returns
    -------
    R
        The result of ``visit`` for ``expr`` itself.

    Notes
    -----
    Subexpressions are visited left before right, so the first exception
    raised by ``visit`` comes from the leftmost failing subtree. Nesting depth
    is limited only by memory.
    """
    results: list[R] = []
    for node in postorder(expr):
        arity = len(children(node))
        operands = tuple(results[len(results) - arity :])
        del results[len(results) - arity :]
        results.append(visit(node, operands))
    return results[0]


def free_names(expr: DeltaQ) -> list[str]:
    """Names referenced by ``expr`` in order of first occurrence."""
    return list(dict.fromkeys(node.name for node in walk(expr) if isinstance(node, Name)))


def is_closed(expr: DeltaQ) -> bool:
    """Whether ``expr`` contains neither names nor black boxes."""
    return not any(isinstance(node, Name | BlackBox) for node in walk(expr))


__all__ = [
    "DeltaQ",
    "DeltaQNode",
    "Name",
    "Literal",
    "Seq",
    "Choice",
    "ForAll",
    "ForSome",
    "BlackBox",
    "name",
    "literal",
    "sequence",
    "choice",
    "for_all",
    "for_some",
    "black_box",
    "display",
    "format_weight",
    "children",
    "walk",
    "postorder",
    "fold",
    "free_names",
    "is_closed",
]
