"""
Core Type Definitions
=====================

Fundamental types and aliases shared by the distribution engine and the
expression model.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from enum import IntEnum

import numpy as np
from numpy.typing import NDArray


class Ordering(IntEnum):
    """
    Outcome of comparing two distributions under stochastic dominance.

    Attributes
    ----------
    LESS : int
        The left operand never has more cumulative mass than the right one.
    EQUAL : int
        Both operands have identical bins.
    GREATER : int
        The left operand never has less cumulative mass than the right one.

    Notes
    -----
    Incomparable pairs are represented by ``None`` rather than a member.
    """

    LESS = -1
    EQUAL = 0
    GREATER = 1


FixedArray = NDArray[np.uint16]
"""Type alias for arrays of 16-bit fixed-point probabilities."""

WideArray = NDArray[np.int64]
"""Type alias for the wide intermediate used by fixed-point arithmetic."""

type BindingName = str
"""Type alias for names bound in an evaluation context."""


__all__ = [
    "Ordering",
    "FixedArray",
    "WideArray",
    "BindingName",
]
