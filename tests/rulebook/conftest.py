"""Shared fixtures for the rulebook test suite."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from Rulebook.logging_config import LOGGER_NAME
from Rulebook.rulebook import Rulebook
from rulebook_helpers import INDEX_DATA, dump_yaml

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def sample_dir() -> Path:
    """Directory holding the sample rulebook sources."""

    return FIXTURES / "sample"


@pytest.fixture
def build_rulebook() -> Callable[..., Rulebook]:
    """Factory parsing an index plus aspect mappings into a :class:`Rulebook`."""

    def build(*aspects: Dict[str, Any], index: Optional[Dict[str, Any]] = None) -> Rulebook:
        rulebook = Rulebook(logger=logging.getLogger("tests.rulebook"))
        rulebook.parse_index("INDEX.yaml", dump_yaml(index or INDEX_DATA))
        for aspect in aspects:
            rulebook.parse_aspect(f"{aspect['Id']}.yaml", dump_yaml(aspect))
        return rulebook

    return build


@pytest.fixture(autouse=True)
def _reset_logging():
    """Detach handlers installed by ``setup_logging`` during a test."""

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_rulebook_managed", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
