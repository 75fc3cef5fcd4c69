"""
Engine Configuration
====================

Process-wide settings for the expression layer.

- :class:`EngineConfiguration` — immutable settings record.
- :func:`engine_configuration` — cached accessor building the defaults lazily.
- :func:`configure_engine` — replace the active settings.
- :func:`reset_engine_configuration` — drop overrides (test helper).
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any

DEFAULT_MAX_RESOLUTION_DEPTH: int = 256
"""Default bound on nested name substitutions in an evaluation context."""


@dataclass(frozen=True, slots=True)
class EngineConfiguration:
    """
    Settings consulted by the evaluation context.

    Parameters
    ----------
    max_resolution_depth : int, default 256
        Maximum number of nested name substitutions performed while resolving
        an expression. Deeper chains are reported as cyclic definitions.
    """

    max_resolution_depth: int = DEFAULT_MAX_RESOLUTION_DEPTH

    def __post_init__(self) -> None:
        if self.max_resolution_depth <= 0:
            raise ValueError("max_resolution_depth must be a positive integer.")


_override: EngineConfiguration | None = None


@lru_cache(maxsize=1)
def engine_configuration() -> EngineConfiguration:
    """
    Return the active engine configuration.

    Returns
    -------
    EngineConfiguration
        The configuration installed by :func:`configure_engine`, or the
        defaults if none was installed.
    """
    if _override is not None:
        return _override
    return EngineConfiguration()


def configure_engine(**overrides: Any) -> EngineConfiguration:
    """
    Install a new active configuration derived from the current one.

    Parameters
    ----------
    **overrides
        Field values replacing those of the current configuration.

    Returns
    -------
    EngineConfiguration
        The newly active configuration.

    Raises
    ------
    TypeError
        If an override names an unknown field.
    ValueError
        If an override value is invalid.
    """
    global _override
    _override = replace(engine_configuration(), **overrides)
    engine_configuration.cache_clear()
    return _override


def reset_engine_configuration() -> None:
    """Reset the cached configuration to defaults."""
    global _override
    _override = None
    engine_configuration.cache_clear()


__all__ = [
    "DEFAULT_MAX_RESOLUTION_DEPTH",
    "EngineConfiguration",
    "engine_configuration",
    "configure_engine",
    "reset_engine_configuration",
]
