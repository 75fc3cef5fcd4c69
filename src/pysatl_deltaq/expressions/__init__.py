"""
Expressions subpackage

The ΔQ expression model:

- expression tree, builders and notation (:mod:`.delta_q`);
- evaluation of closed expressions (:mod:`.evaluation`);
- the name binding store and evaluation requests (:mod:`.context`).
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"
from .context import EvaluationContext
from .delta_q import (
    BlackBox,
    Choice,
    DeltaQ,
    DeltaQNode,
    ForAll,
    ForSome,
    Literal,
    Name,
    Seq,
    black_box,
    choice,
    display,
    for_all,
    for_some,
    free_names,
    is_closed,
    literal,
    name,
    sequence,
)
from .evaluation import evaluate

__all__ = [
    # tree
    "DeltaQ",
    "DeltaQNode",
    "Name",
    "Literal",
    "Seq",
    "Choice",
    "ForAll",
    "ForSome",
    "BlackBox",
    # builders
    "name",
    "literal",
    "sequence",
    "choice",
    "for_all",
    "for_some",
    "black_box",
    # inspection
    "display",
    "free_names",
    "is_closed",
    # evaluation
    "evaluate",
    "EvaluationContext",
]
