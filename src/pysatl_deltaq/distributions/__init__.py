"""
Distributions subpackage

The distribution engine of PySATL ΔQ:

- 16-bit fixed-point arithmetic (:mod:`.fixed_point`);
- the discretized CDF and its combinators (:mod:`.cdf`).
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"
from .cdf import CDF
from .fixed_point import ONE, fixed_mul, fraction_to_fixed, narrow, quantize

__all__ = [
    # distribution
    "CDF",
    # fixed-point primitives
    "ONE",
    "fixed_mul",
    "fraction_to_fixed",
    "narrow",
    "quantize",
]
