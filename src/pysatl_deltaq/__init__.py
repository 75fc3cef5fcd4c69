"""
PySATL ΔQ
=========

Discretized completion-time distributions and the ΔQ algebra for composing
them: a fixed-point CDF engine, an expression language over it, and an
evaluation context binding names to expressions.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from importlib.metadata import version

from .configuration import (
    EngineConfiguration,
    configure_engine,
    engine_configuration,
    reset_engine_configuration,
)
from .distributions import *
from .distributions import __all__ as _distr_all
from .errors import *
from .errors import __all__ as _errors_all
from .expressions import *
from .expressions import __all__ as _expr_all
from .types import *
from .types import __all__ as _types_all

__version__ = version("pysatl-deltaq")
__all__ = [
    "__version__",
    "EngineConfiguration",
    "configure_engine",
    "engine_configuration",
    "reset_engine_configuration",
    *_distr_all,
    *_errors_all,
    *_expr_all,
    *_types_all,
]

del _distr_all
del _errors_all
del _expr_all
del _types_all
