"""
Record Form
===========

JSON-compatible records for CDFs, ΔQ expressions and evaluation contexts.

Record layout
-------------
- CDF: ``{"data": [int, ...], "bin_size": float}`` with fixed-point bins.
- Expression, tagged by variant::

      {"Name": "A"}
      {"CDF": {"data": [...], "bin_size": 1.0}}
      {"Seq": [<expr>, <expr>]}
      {"Choice": [<expr>, 1.0, <expr>, 2.0]}
      {"ForAll": [<expr>, <expr>]}
      {"ForSome": [<expr>, <expr>]}
      "BlackBox"

- Context: ``{"<name>": <expr>, ...}``.

Incoming records are checked against :data:`RECORD_SCHEMA` (JSON Schema draft
2020-12) before decoding. Expression records are checked and decoded one node
at a time with an explicit stack, so deeply nested expressions round-trip.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import json
import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from pysatl_deltaq.distributions.cdf import CDF
from pysatl_deltaq.errors import RecordError
from pysatl_deltaq.expressions.context import EvaluationContext
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
    from pysatl_deltaq.expressions.delta_q import DeltaQ

logger = logging.getLogger(__name__)

# operands are checked node by node, see _check_expression
_OPERAND: dict[str, Any] = {}

_PAIR = {
    "type": "array",
    "prefixItems": [_OPERAND, _OPERAND],
    "minItems": 2,
    "maxItems": 2,
}

RECORD_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$defs": {
        "cdf": {
            "type": "object",
            "properties": {
                "data": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 0, "maximum": 65535},
                },
                "bin_size": {"type": "number", "exclusiveMinimum": 0},
            },
            "required": ["data", "bin_size"],
            "additionalProperties": False,
        },
        "node": {
            "oneOf": [
                {"const": "BlackBox"},
                {
                    "type": "object",
                    "properties": {"Name": {"type": "string"}},
                    "required": ["Name"],
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "properties": {"CDF": {"$ref": "#/$defs/cdf"}},
                    "required": ["CDF"],
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "properties": {"Seq": _PAIR},
                    "required": ["Seq"],
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "properties": {
                        "Choice": {
                            "type": "array",
                            "prefixItems": [
                                _OPERAND,
                                {"type": "number"},
                                _OPERAND,
                                {"type": "number"},
                            ],
                            "minItems": 4,
                            "maxItems": 4,
                        }
                    },
                    "required": ["Choice"],
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "properties": {"ForAll": _PAIR},
                    "required": ["ForAll"],
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "properties": {"ForSome": _PAIR},
                    "required": ["ForSome"],
                    "additionalProperties": False,
                },
            ]
        },
        "context": {"type": "object"},
    },
}
"""
JSON Schema describing CDF records, a single expression node and the context
envelope. Expressions are validated one node at a time, so nesting depth is
not bounded by the validator.
"""

_OPERAND_POSITIONS = {"Seq": (0, 1), "Choice": (0, 2), "ForAll": (0, 1), "ForSome": (0, 1)}
_KINDS = ("cdf", "expression", "context")


@lru_cache(maxsize=None)
def _validator(definition: str) -> Draft202012Validator:
    schema = {**RECORD_SCHEMA, "$ref": f"#/$defs/{definition}"}
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _check(record: Any, definition: str, kind: str, path: tuple[Any, ...]) -> None:
    error = best_match(_validator(definition).iter_errors(record))
    if error is not None:
        location = "/".join(str(p) for p in (*path, *error.absolute_path)) or "<root>"
        raise RecordError(f"Invalid {kind} record at {location}: {error.message}")


def _operands(record: Any) -> list[tuple[Any, Any]]:
    """``(position, operand record)`` pairs of an expression record node."""
    if not isinstance(record, dict):
        return []
    ((tag, body),) = record.items()
    return [(i, body[i]) for i in _OPERAND_POSITIONS.get(tag, ())]


def _check_expression(record: Any, kind: str, path: tuple[Any, ...]) -> None:
    stack = [(record, path)]
    while stack:
        node, where = stack.pop()
        _check(node, "node", kind, where)
        tag = next(iter(node)) if isinstance(node, dict) else None
        stack.extend(
            (operand, (*where, tag, i)) for i, operand in reversed(_operands(node))
        )


def validate_record(record: Any, kind: str) -> None:
    """
    Check a record against the layout of ``kind``.

    Parameters
    ----------
    record : Any
        Decoded JSON value.
    kind : {"cdf", "expression", "context"}
        Which record layout to expect.

    Raises
    ------
    RecordError
        If the record does not match the layout.
    """
    if kind not in _KINDS:
        raise ValueError(f"Unknown record kind: {kind}")
    if kind == "cdf":
        _check(record, "cdf", kind, ())
    elif kind == "expression":
        _check_expression(record, kind, ())
    else:
        _check(record, "context", kind, ())
        for name, expr in record.items():
            _check_expression(expr, kind, (name,))


def cdf_to_record(cdf: CDF) -> dict[str, Any]:
    """Record form of a CDF."""
    return {"data": cdf.data.tolist(), "bin_size": cdf.bin_size}


def cdf_from_record(record: Any) -> CDF:
    """
    Decode a CDF record.

    Raises
    ------
    RecordError
        If the record does not match the CDF layout.
    NotMonotoneError
        If the bins decrease.
    """
    validate_record(record, "cdf")
    return _decode_cdf(record)


def _decode_cdf(record: dict[str, Any]) -> CDF:
    # the schema admits integral floats such as 1.0
    return CDF.from_fixed([int(v) for v in record["data"]], record["bin_size"])


def expression_to_record(expr: DeltaQ) -> Any:
    """Record form of an expression."""
    return fold(expr, _encode_node)


def _encode_node(node: DeltaQ, operands: tuple[Any, ...]) -> Any:
    match node:
        case Name(identifier):
            return {"Name": identifier}
        case Literal(cdf):
            return {"CDF": cdf_to_record(cdf)}
        case BlackBox():
            return "BlackBox"
        case Seq():
            return {"Seq": list(operands)}
        case Choice(_, first_weight, _, second_weight):
            return {
                "Choice": [operands[0], float(first_weight), operands[1], float(second_weight)]
            }
        case ForAll():
            return {"ForAll": list(operands)}
        case ForSome():
            return {"ForSome": list(operands)}
        case _:
            raise TypeError(f"Not a ΔQ expression: {node!r}")


def expression_from_record(record: Any) -> DeltaQ:
    """
    Decode an expression record.

    Raises
    ------
    RecordError
        If the record does not match the expression layout.
    NotMonotoneError
        If an embedded CDF has decreasing bins.
    """
    validate_record(record, "expression")
    return _decode_expression(record)


def _decode_expression(record: Any) -> DeltaQ:
    # bottom-up over a validated record, mirroring delta_q.fold
    results: list[DeltaQ] = []
    stack: list[tuple[Any, bool]] = [(record, False)]
    while stack:
        node, expanded = stack.pop()
        operands = [operand for _, operand in _operands(node)]
        if operands and not expanded:
            stack.append((node, True))
            stack.extend((operand, False) for operand in reversed(operands))
            continue
        decoded = tuple(results[len(results) - len(operands) :])
        del results[len(results) - len(operands) :]
        results.append(_decode_node(node, decoded))
    return results[0]


def _decode_node(record: Any, operands: tuple[DeltaQ, ...]) -> DeltaQ:
    if record == "BlackBox":
        return BlackBox()
    ((tag, body),) = record.items()
    match tag:
        case "Name":
            return Name(body)
        case "CDF":
            return Literal(_decode_cdf(body))
        case "Seq":
            return Seq(*operands)
        case "Choice":
            return Choice(operands[0], float(body[1]), operands[1], float(body[3]))
        case "ForAll":
            return ForAll(*operands)
        case "ForSome":
            return ForSome(*operands)
        case _:
            raise RecordError(f"Unknown expression tag: {tag}")


def context_to_record(context: EvaluationContext) -> dict[str, Any]:
    """Record form of an evaluation context, ordered by name."""
    return {name: expression_to_record(expr) for name, expr in context.iter()}


def context_from_record(record: Any) -> EvaluationContext:
    """
    Decode a context record.

    Raises
    ------
    RecordError
        If the record does not match the context layout.
    """
    validate_record(record, "context")
    context = EvaluationContext()
    for name, expr in record.items():
        context.put(name, _decode_expression(expr))
    logger.debug("Decoded context with %d bindings", len(context))
    return context


def dumps(context: EvaluationContext, **kwargs: Any) -> str:
    """Serialize a context to JSON text; ``kwargs`` go to :func:`json.dumps`."""
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(context_to_record(context), **kwargs)


def loads(text: str | bytes) -> EvaluationContext:
    """
    Parse a context from JSON text.

    Raises
    ------
    RecordError
        If the text is not valid JSON or not a context record.
    """
    try:
        record = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RecordError(f"Invalid JSON: {exc}") from exc
    return context_from_record(record)


__all__ = [
    "RECORD_SCHEMA",
    "validate_record",
    "cdf_to_record",
    "cdf_from_record",
    "expression_to_record",
    "expression_from_record",
    "context_to_record",
    "context_from_record",
    "dumps",
    "loads",
]
