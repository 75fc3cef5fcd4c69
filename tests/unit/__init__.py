"""
PySATL ΔQ
=========

Unit tests for the fixed-point CDF engine, the expression layer and records.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"
