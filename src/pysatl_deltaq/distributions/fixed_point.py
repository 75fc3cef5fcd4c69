"""
Fixed-Point Arithmetic
======================

16-bit fixed-point fractions of one, as stored in CDF bins.

``0`` encodes probability 0 and :data:`ONE` (65535) encodes probability 1.
Products and sums are formed in a wide signed intermediate and narrowed back
with :func:`narrow`, which treats any out-of-range value as a broken invariant.

Notes
-----
Two quantization rules coexist and must not be unified:

- :func:`quantize` scales by 65535 and truncates (construction of a CDF);
- :func:`fraction_to_fixed` scales by 65536, saturates at 65535 and truncates
  (the weight of a mixture).
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Any, cast

import numpy as np

from pysatl_deltaq.errors import FixedPointInvariantError

if TYPE_CHECKING:
    import numpy.typing as npt

    from pysatl_deltaq.types import FixedArray, WideArray

ONE: int = 65535
"""Fixed-point encoding of probability 1."""

SHIFT: int = 16
"""Binary point position used by :func:`fixed_mul`."""


def fixed_mul(x: npt.ArrayLike, y: npt.ArrayLike) -> WideArray:
    """
    Multiply fixed-point fractions with a round-up bias.

    Parameters
    ----------
    x, y : array_like
        Fixed-point operands in ``[0, 65535]``; broadcast against each other.

    Returns
    -------
    WideArray
        ``((x * y) + 65535) >> 16`` in the wide dtype.
    """
    wide = np.asarray(x, dtype=np.int64) * np.asarray(y, dtype=np.int64)
    return cast("WideArray", (wide + ONE) >> SHIFT)


def quantize(values: npt.ArrayLike) -> FixedArray:
    """
    Convert probabilities in ``[0, 1]`` to bins by truncating ``value * 65535``.

    The caller is responsible for range validation.
    """
    scaled = np.asarray(values, dtype=np.float64) * float(ONE)
    return cast("FixedArray", scaled.astype(np.uint16))


def fraction_to_fixed(fraction: float) -> int:
    """
    Convert a mixture fraction to fixed point.

    Parameters
    ----------
    fraction : float
        A fraction in ``[0, 1]``.

    Returns
    -------
    int
        ``fraction * 65536`` saturated at 65535 and truncated toward zero.
    """
    return int(min(fraction * 65536.0, float(ONE)))


def narrow(values: Any, operation: str) -> FixedArray:
    """
    Narrow a wide intermediate back to 16-bit bins.

    Parameters
    ----------
    values : array_like
        Wide integer values.
    operation : str
        Name of the combinator, used in the error message.

    Returns
    -------
    FixedArray
        The same values as ``uint16``.

    Raises
    ------
    FixedPointInvariantError
        If any value is negative or exceeds :data:`ONE`.
    """
    wide = np.asarray(values, dtype=np.int64)
    if wide.size:
        if int(wide.min()) < 0:
            raise FixedPointInvariantError(f"underflow during {operation}")
        if int(wide.max()) > ONE:
            raise FixedPointInvariantError(f"overflow during {operation}")
    return cast("FixedArray", wide.astype(np.uint16))


__all__ = [
    "ONE",
    "SHIFT",
    "fixed_mul",
    "quantize",
    "fraction_to_fixed",
    "narrow",
]
