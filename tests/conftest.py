from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Callable, Iterator

import pytest

from tests._fixtures.model_builder import ModelBuilder


@pytest.fixture
def model_builder() -> ModelBuilder:
    """Provide a fresh in-memory model builder."""
    return ModelBuilder()


@pytest.fixture
def write_dts(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented declaration file under tmp_path and return its path."""

    def _write(content: str, filename: str = "api.d.ts") -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _reset_externgen_logger() -> Iterator[None]:
    """Drop handlers configured by CLI runs so later tests start clean."""
    yield
    logger = logging.getLogger("externgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
