"""
Discretized Cumulative Distribution Functions
=============================================

This module defines :class:`CDF`, the only distribution representation of the
engine: ``N`` cumulative probabilities on a uniform time grid, stored as 16-bit
fixed-point fractions of one.

Bin ``i`` holds the probability that the outcome has occurred by time
``i * bin_size``.

Combinators
-----------
- :meth:`CDF.mixture` — probabilistic choice between two outcomes.
- :meth:`CDF.both` — both independent outcomes occur (product).
- :meth:`CDF.either` — at least one occurs (inclusion–exclusion).
- :meth:`CDF.sequence` — one outcome after the other (convolution).
- :meth:`CDF.compare` — stochastic-dominance partial order.

Notes
-----
- Instances are immutable; every combinator returns a new CDF.
- Binary operations require equal ``bin_size`` and equal length.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import math
from typing import TYPE_CHECKING, cast

import numpy as np

from pysatl_deltaq.distributions.fixed_point import (
    ONE,
    fixed_mul,
    fraction_to_fixed,
    narrow,
    quantize,
)
from pysatl_deltaq.errors import IncompatibleError, InvalidRangeError, NotMonotoneError
from pysatl_deltaq.types import Ordering

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    import numpy.typing as npt

    from pysatl_deltaq.types import FixedArray


def _check_bin_size(bin_size: float) -> float:
    bin_size = float(bin_size)
    if not (math.isfinite(bin_size) and bin_size > 0.0):
        raise InvalidRangeError(f"Bin size must be a positive finite number, got {bin_size}")
    return bin_size


class CDF:
    """
    Immutable discretized CDF with 16-bit fixed-point bins.

    Parameters
    ----------
    values : iterable of float
        Cumulative probabilities, one per bin.
    bin_size : float
        Time width of one bin.

    Raises
    ------
    InvalidRangeError
        If any value lies outside ``[0, 1]`` or ``bin_size`` is not positive.
    NotMonotoneError
        If the values decrease anywhere.

    Notes
    -----
    Each value is stored as ``int(value * 65535)``, i.e. truncated.

    Examples
    --------
    >>> cdf = CDF([0.0, 0.25, 0.5, 0.75, 1.0], bin_size=0.25)
    >>> cdf.data.tolist()
    [0, 16383, 32767, 49151, 65535]
    """

    __slots__ = ("_data", "_bin_size")

    _data: FixedArray
    _bin_size: float

    def __init__(self, values: Iterable[float] | npt.ArrayLike, bin_size: float) -> None:
        source = values if isinstance(values, np.ndarray) else list(values)
        arr = np.asarray(source, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError("CDF expects a one-dimensional sequence of probabilities.")
        if not bool(np.all((arr >= 0.0) & (arr <= 1.0))):
            raise InvalidRangeError("Data vector must contain values between 0 and 1")
        if bool(np.any(arr[1:] < arr[:-1])):
            raise NotMonotoneError("Data vector must contain monotonically increasing values")
        self._init(quantize(arr), _check_bin_size(bin_size))

    def _init(self, data: FixedArray, bin_size: float) -> None:
        data.flags.writeable = False
        self._data = data
        self._bin_size = bin_size

    @classmethod
    def _from_bins(cls, data: FixedArray, bin_size: float) -> CDF:
        obj = cls.__new__(cls)
        obj._init(data, bin_size)
        return obj

    @classmethod
    def from_fixed(cls, data: Iterable[int] | npt.ArrayLike, bin_size: float) -> CDF:
        """
        Build a CDF from already-quantized bins.

        Parameters
        ----------
        data : iterable of int
            Fixed-point cumulative probabilities in ``[0, 65535]``.
        bin_size : float
            Time width of one bin.

        Raises
        ------
        InvalidRangeError
            If a bin is not an integer in ``[0, 65535]``.
        NotMonotoneError
            If the bins decrease anywhere.
        """
        arr = np.asarray(data if isinstance(data, np.ndarray) else list(data))
        if arr.size == 0:
            arr = arr.astype(np.int64)
        if arr.ndim != 1:
            raise ValueError("CDF expects a one-dimensional sequence of bins.")
        if arr.dtype == np.bool_ or not np.issubdtype(arr.dtype, np.integer):
            raise InvalidRangeError("Fixed-point bins must be integers")
        wide = arr.astype(np.int64)
        if bool(np.any((wide < 0) | (wide > ONE))):
            raise InvalidRangeError(f"Fixed-point bins must lie between 0 and {ONE}")
        if bool(np.any(wide[1:] < wide[:-1])):
            raise NotMonotoneError("Data vector must contain monotonically increasing values")
        return cls._from_bins(wide.astype(np.uint16), _check_bin_size(bin_size))

    @classmethod
    def discretize(cls, cdf_func: Callable[[float], float], bin_size: float, bins: int) -> CDF:
        """
        Sample a cumulative distribution function on the bin grid.

        Parameters
        ----------
        cdf_func : Callable[[float], float]
            Cumulative distribution function, e.g. ``scipy.stats.expon().cdf``.
        bin_size : float
            Time width of one bin.
        bins : int
            Number of bins; bin ``i`` is evaluated at ``i * bin_size``.

        Returns
        -------
        CDF
            The discretized distribution.

        Notes
        -----
        Values are clipped to ``[0, 1]`` and made non-decreasing with a running
        maximum, absorbing round-off in the sampled function.
        """
        if bins < 0:
            raise ValueError(f"Number of bins must be non-negative, got {bins}")
        bin_size = _check_bin_size(bin_size)
        raw = np.array([float(cdf_func(i * bin_size)) for i in range(bins)], dtype=np.float64)
        if bool(np.any(np.isnan(raw))):
            raise InvalidRangeError("Sampled CDF produced NaN")
        values = np.maximum.accumulate(np.clip(raw, 0.0, 1.0)) if bins else raw
        return cls(values, bin_size)

    @property
    def data(self) -> FixedArray:
        """Copy of the fixed-point bins."""
        return cast("FixedArray", self._data.copy())

    @property
    def bin_size(self) -> float:
        """Time width of one bin."""
        return self._bin_size

    @property
    def probabilities(self) -> npt.NDArray[np.float64]:
        """Cumulative probabilities as floats in ``[0, 1]``."""
        return self._data / float(ONE)

    @property
    def width(self) -> float:
        """Total time span covered by the bins."""
        return len(self._data) * self._bin_size

    def points(self) -> Iterator[tuple[float, float]]:
        """Iterate ``(time, cumulative probability)`` pairs, one per bin."""
        for i, value in enumerate(self._data.tolist()):
            yield i * self._bin_size, value / ONE

    def __len__(self) -> int:
        return int(self._data.shape[0])

    def _check_compatible(self, other: CDF, operation: str) -> None:
        if not isinstance(other, CDF):
            raise TypeError(f"Expected a CDF operand for {operation}, got {type(other).__name__}")
        if self._bin_size != other._bin_size:
            raise IncompatibleError(f"CDFs must have the same bin size for {operation}")
        if len(self) != len(other):
            raise IncompatibleError(f"CDFs must have the same length for {operation}")

    def mixture(self, fraction: float, other: CDF) -> CDF:
        """
        Choose ``self`` with probability ``fraction`` and ``other`` otherwise.

        Parameters
        ----------
        fraction : float
            Probability of ``self``, in ``[0, 1]``.
        other : CDF
            Alternative outcome.

        Returns
        -------
        CDF
            ``fixed_mul(self, q(f)) + fixed_mul(other, q(1 - f))`` per bin.
            A bin of 65536, reachable only through rounding, is stored as
            65535.

        Raises
        ------
        IncompatibleError
            If the operands differ in bin size or length.
        InvalidRangeError
            If ``fraction`` is outside ``[0, 1]``.
        """
        self._check_compatible(other, "choice")
        fraction = float(fraction)
        if not 0.0 <= fraction <= 1.0:
            raise InvalidRangeError("Fraction must be between 0 and 1")
        mine = fraction_to_fixed(fraction)
        theirs = fraction_to_fixed(1.0 - fraction)
        combined = fixed_mul(self._data, mine) + fixed_mul(other._data, theirs)
        # dyadic fractions give mine + theirs == 65536; both round-up biases
        # can then push a full bin exactly one unit past ONE. That one value is
        # stored as ONE instead of aborting with an overflow; anything larger
        # still fails in narrow
        combined = np.where(combined == ONE + 1, ONE, combined)
        return CDF._from_bins(narrow(combined, "choice"), self._bin_size)

    def both(self, other: CDF) -> CDF:
        """Completion time of two independent outcomes that must both occur."""
        self._check_compatible(other, "for_all")
        product = fixed_mul(self._data, other._data)
        return CDF._from_bins(narrow(product, "for_all"), self._bin_size)

    def either(self, other: CDF) -> CDF:
        """Completion time of the first of two independent outcomes."""
        self._check_compatible(other, "for_some")
        a = self._data.astype(np.int64)
        b = other._data.astype(np.int64)
        union = a + b - fixed_mul(a, b)
        return CDF._from_bins(narrow(union, "for_some"), self._bin_size)

    def sequence(self, other: CDF) -> CDF:
        """
        Completion time of ``self`` followed by ``other``.

        The result is the discrete convolution of this CDF with the probability
        mass of ``other``: ``result[i + j] += fixed_mul(self[i], pmf[j])`` for
        ``i + j < N``, where ``pmf`` is the first difference of ``other``.
        """
        self._check_compatible(other, "convolution")
        n = len(self)
        cdf = self._data.astype(np.int64)
        pmf = np.diff(other._data.astype(np.int64), prepend=0)
        acc = np.zeros(n, dtype=np.int64)
        for i in range(n):
            acc[i:] += fixed_mul(cdf[i], pmf[: n - i])
        return CDF._from_bins(narrow(acc, "convolution"), self._bin_size)

    choice = mixture
    for_all = both
    for_some = either
    convolve = sequence

    def compare(self, other: CDF) -> Ordering | None:
        """
        Compare under first-order stochastic dominance.

        Returns
        -------
        Ordering or None
            ``LESS`` if no bin of ``self`` exceeds ``other`` (and some bin is
            smaller), ``GREATER`` for the converse, ``EQUAL`` if all bins
            match, ``None`` if bins disagree in both directions or the
            operands have different bin sizes or lengths.

        Notes
        -----
        Operands of different lengths are incomparable even when one is a
        prefix of the other: ``[0, 1]`` against ``[0, 1, 1]`` gives ``None``,
        not ``EQUAL``. No common-prefix comparison is attempted.
        """
        if self._bin_size != other._bin_size or len(self) != len(other):
            return None
        less = bool(np.any(self._data < other._data))
        greater = bool(np.any(self._data > other._data))
        if less and greater:
            return None
        if less:
            return Ordering.LESS
        if greater:
            return Ordering.GREATER
        return Ordering.EQUAL

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CDF):
            return NotImplemented
        return self.compare(other) is Ordering.LESS

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CDF):
            return NotImplemented
        return self.compare(other) in (Ordering.LESS, Ordering.EQUAL)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CDF):
            return NotImplemented
        return self.compare(other) is Ordering.GREATER

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CDF):
            return NotImplemented
        return self.compare(other) in (Ordering.GREATER, Ordering.EQUAL)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CDF):
            return NotImplemented
        return self._bin_size == other._bin_size and bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash((self._bin_size, self._data.tobytes()))

    def __repr__(self) -> str:
        return f"CDF(data={self._data.tolist()}, bin_size={self._bin_size!r})"

    def __str__(self) -> str:
        values = ", ".join(f"{p:.4g}" for p in self.probabilities.tolist())
        return f"CDF[{values} | bin_size={self._bin_size:g}]"


__all__ = [
    "CDF",
]
