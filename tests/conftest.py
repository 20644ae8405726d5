"""
Shared pytest fixtures for livepercentiles tests.
"""

import logging
import random
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy inspection.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator so stream-based tests are reproducible."""
    return random.Random(42)


@pytest.fixture(autouse=True)
def reset_livepercentiles_logging():
    """Reset the package logger before and after each test.

    Removes every handler but a NullHandler and resets the level, so
    logging configuration from one test never leaks into another.
    """
    logger = logging.getLogger("livepercentiles")

    def _reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()
