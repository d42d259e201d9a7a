from __future__ import annotations

import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_loguru():
    yield
    # The CLI replaces loguru sinks; don't leave one bound to a captured stream.
    logger.remove()
    logger.add(sys.stderr, level="INFO")
