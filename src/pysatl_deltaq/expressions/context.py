"""
Evaluation Context
==================

A binding store mapping names to ΔQ expressions, plus the evaluation request
built on top of it: resolve every name of an expression against the store,
then evaluate the closed result.

Notes
-----
- The store is a plain mutable container and is not synchronized.
- Enumeration is ordered by name so that listings are stable.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pysatl_deltaq.configuration import engine_configuration
from pysatl_deltaq.errors import CyclicDefinitionError, DeltaQError, UnresolvedNameError
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
from pysatl_deltaq.expressions.evaluation import evaluate

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from pysatl_deltaq.distributions.cdf import CDF
    from pysatl_deltaq.expressions.delta_q import DeltaQ
    from pysatl_deltaq.types import BindingName

logger = logging.getLogger(__name__)


class EvaluationContext:
    """
    Named ΔQ expressions and their evaluation.

    Parameters
    ----------
    bindings : Mapping[str, DeltaQ] or iterable of (str, DeltaQ), optional
        Initial bindings.

    Examples
    --------
    >>> from pysatl_deltaq import CDF, EvaluationContext, literal, name, sequence
    >>> ctx = EvaluationContext()
    >>> ctx.put("hop", literal(CDF([0.0, 1.0, 1.0], bin_size=1.0)))
    >>> ctx.put("out", sequence(name("hop"), name("hop")))
    >>> ctx.eval("out").data.tolist()
    [0, 0, 65535]
    """

    __slots__ = ("_bindings",)

    def __init__(
        self, bindings: Mapping[BindingName, DeltaQ] | Iterable[tuple[BindingName, DeltaQ]] = ()
    ) -> None:
        items = bindings.items() if isinstance(bindings, Mapping) else bindings
        self._bindings: dict[BindingName, DeltaQ] = dict(items)

    def put(self, name: BindingName, expr: DeltaQ) -> None:
        """Bind ``name`` to ``expr``, replacing any previous binding."""
        if name in self._bindings:
            logger.debug("Rebinding '%s' to %s", name, expr)
        self._bindings[name] = expr

    def get(self, name: BindingName) -> DeltaQ | None:
        """Expression bound to ``name``, or ``None``."""
        return self._bindings.get(name)

    def remove(self, name: BindingName) -> DeltaQ | None:
        """Drop the binding of ``name`` and return it, or ``None`` if absent."""
        return self._bindings.pop(name, None)

    def names(self) -> list[BindingName]:
        """Bound names in display order."""
        return sorted(self._bindings)

    def iter(self) -> Iterator[tuple[BindingName, DeltaQ]]:
        """Iterate ``(name, expression)`` pairs in display order."""
        for name in self.names():
            yield name, self._bindings[name]

    __iter__ = iter

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EvaluationContext):
            return NotImplemented
        return self._bindings == other._bindings

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}: {expr}" for name, expr in self.iter())
        return f"EvaluationContext({{{inner}}})"

    def resolve(self, expr: DeltaQ, max_depth: int | None = None) -> DeltaQ:
        """
        Substitute every bound name in ``expr``.

        Parameters
        ----------
        expr : DeltaQ
            Expression possibly referencing bound names.
        max_depth : int, optional
            Maximum nesting of substitutions. Defaults to the engine
            configuration's ``max_resolution_depth``.

        Returns
        -------
        DeltaQ
            An expression without names. Black boxes are kept; evaluating
            them fails.

        Raises
        ------
        UnresolvedNameError
            If a referenced name is not bound.
        CyclicDefinitionError
            If a name refers back to itself or substitutions nest deeper than
            ``max_depth``.
        """
        limit = engine_configuration().max_resolution_depth if max_depth is None else max_depth
        resolving: list[BindingName] = []
        resolved: dict[BindingName, DeltaQ] = {}

        def _resolve_name(identifier: BindingName) -> DeltaQ:
            if identifier in resolved:
                return resolved[identifier]
            if identifier in resolving:
                chain = [*resolving[resolving.index(identifier) :], identifier]
                raise CyclicDefinitionError(
                    f"Cyclic definition: {' -> '.join(chain)}", identifier
                )
            if len(resolving) >= limit:
                raise CyclicDefinitionError(
                    f"Name resolution exceeds {limit} nested substitutions at '{identifier}'",
                    identifier,
                )
            bound = self._bindings.get(identifier)
            if bound is None:
                raise UnresolvedNameError(f"Name '{identifier}' is not bound", identifier)

            resolving.append(identifier)
            try:
                result = fold(bound, _substitute)
            finally:
                resolving.pop()
            logger.debug("Resolved '%s' to %s", identifier, result)
            resolved[identifier] = result
            return result

        def _substitute(node: DeltaQ, operands: tuple[DeltaQ, ...]) -> DeltaQ:
            match node:
                case Name(identifier):
                    return _resolve_name(identifier)
                case Literal() | BlackBox():
                    return node
                case Seq():
                    return Seq(*operands)
                case Choice(_, first_weight, _, second_weight):
                    return Choice(operands[0], first_weight, operands[1], second_weight)
                case ForAll():
                    return ForAll(*operands)
                case ForSome():
                    return ForSome(*operands)
                case _:
                    raise TypeError(f"Not a ΔQ expression: {node!r}")

        return fold(expr, _substitute)

    def eval(self, target: BindingName | DeltaQ) -> CDF:
        """
        Evaluate a bound name or an expression over this context.

        Parameters
        ----------
        target : str or DeltaQ
            Name of a binding, or an expression whose names are looked up here.

        Returns
        -------
        CDF
            The resulting distribution.

        Raises
        ------
        DeltaQError
            The first input error met while resolving or evaluating.
        """
        expr = Name(target) if isinstance(target, str) else target
        logger.debug("Evaluating %s", expr)
        return evaluate(self.resolve(expr))

    def try_eval(self, target: BindingName | DeltaQ) -> CDF | str:
        """
        Like :meth:`eval`, but report input errors as text.

        Returns
        -------
        CDF or str
            The distribution, or the message of the input error.
        """
        try:
            return self.eval(target)
        except DeltaQError as exc:
            logger.debug("Evaluation of %s failed: %s", target, exc)
            return str(exc)


__all__ = [
    "EvaluationContext",
]
