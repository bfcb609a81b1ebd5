from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.go_builder import GoPackageBuilder


@pytest.fixture
def go_builder(tmp_path: Path) -> GoPackageBuilder:
    """Provide a reusable Go source builder rooted at the pytest tmp_path."""
    return GoPackageBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _mockpkg_logs_reach_caplog() -> Iterator[None]:
    """configure_logging() detaches the mockpkg logger; reattach it for caplog."""
    logger = logging.getLogger("mockpkg")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
