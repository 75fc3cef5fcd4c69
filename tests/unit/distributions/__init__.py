"""
PySATL ΔQ
=========

Tests for fixed-point arithmetic and discretized CDFs.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"
