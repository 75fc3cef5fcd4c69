from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Generator
from typing import Any

import pytest

from pysatl_deltaq.configuration import reset_engine_configuration


@pytest.fixture(autouse=True)
def _fresh_configuration() -> Generator[None, Any, None]:
    reset_engine_configuration()
    yield
    reset_engine_configuration()
