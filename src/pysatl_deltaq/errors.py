"""
Error hierarchy.

:class:`DeltaQError` and its subclasses report bad input and are meant to be
caught by callers. :class:`FixedPointInvariantError` signals a broken internal
invariant and is never raised for validated input.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"


class DeltaQError(ValueError):
    """Base class for recoverable input errors."""


class InvalidRangeError(DeltaQError):
    """A probability or fraction lies outside ``[0, 1]``."""


class NotMonotoneError(DeltaQError):
    """A cumulative sequence decreases somewhere."""


class IncompatibleError(DeltaQError):
    """Operands differ in bin size or bin count."""


class ZeroWeightError(DeltaQError):
    """Choice weights sum to zero, so no fraction can be derived."""


class UnresolvedNameError(DeltaQError):
    """
    An expression still contains a free name or a black box.

    Parameters
    ----------
    message : str
        Human-readable description.
    name : str or None, default None
        The offending name, ``None`` for a black box.
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class CyclicDefinitionError(UnresolvedNameError):
    """A name is (transitively) defined in terms of itself."""


class RecordError(DeltaQError):
    """A structured record does not describe a valid CDF or expression."""


class FixedPointInvariantError(RuntimeError):
    """
    Raised when fixed-point arithmetic leaves the 16-bit range.

    This cannot happen for CDFs that went through validated construction;
    seeing it means an invariant was bypassed upstream.
    """


__all__ = [
    "DeltaQError",
    "InvalidRangeError",
    "NotMonotoneError",
    "IncompatibleError",
    "ZeroWeightError",
    "UnresolvedNameError",
    "CyclicDefinitionError",
    "RecordError",
    "FixedPointInvariantError",
]
