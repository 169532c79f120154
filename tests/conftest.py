"""
Shared pytest fixtures for elasticsim tests.
"""

import logging
from pathlib import Path

import pytest

from elasticsim.core.clock import Clock
from elasticsim.core.temporal import Instant


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy access.
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
    test_dir = test_output_root / module_name / request.node.name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def clock() -> Clock:
    return Clock(Instant.Epoch)


@pytest.fixture(autouse=True)
def reset_elasticsim_logging():
    """Reset the elasticsim logger to its silent library default around each test."""
    logger = logging.getLogger("elasticsim")

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
