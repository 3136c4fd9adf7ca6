from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.fake_runner import ScriptedRunner


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    """Provide a fresh runner double with no scripted commands."""
    return ScriptedRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Provide an empty workspace directory."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def test_logger() -> logging.Logger:
    """Logger that propagates to pytest's caplog regardless of CLI logging setup."""
    logger = logging.getLogger("tests.localreview")
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    return logger


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo handler changes made by configure_logging() during CLI tests."""
    logger = logging.getLogger("localreview")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
