from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from commitsplit.logging import SERVICE_LOGGERS
from commitsplit.models import CrossRepoDiff
from commitsplit.repos import RepositoryManager
from tests._fixtures.scenarios import three_repo_diff, three_repo_manager


@pytest.fixture
def scenario_diff() -> CrossRepoDiff:
    """The core-lib / api-service / frontend-app diff."""
    return three_repo_diff()


@pytest.fixture
def scenario_manager(tmp_path: Path) -> RepositoryManager:
    """Repository declarations matching ``scenario_diff`` rooted at tmp_path."""
    return three_repo_manager(tmp_path)


@pytest.fixture
def isolated_loggers() -> Iterator[None]:
    """Restore commitsplit and uvicorn logger state after the test."""
    loggers = [logging.getLogger(name) for name in ("commitsplit", *SERVICE_LOGGERS)]
    saved = [(logger, list(logger.handlers), logger.level, logger.propagate) for logger in loggers]
    yield
    for logger, handlers, level, propagate in saved:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            if handler not in handlers:
                handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = propagate
