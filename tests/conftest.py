"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from interstellar_horizons.config import Config
from tests.helpers import load_fixture


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Default configuration backed by an empty temp directory."""
    return Config(str(tmp_path / "config.json"))


@pytest.fixture
def observer_text() -> str:
    return load_fixture("observer_3i.txt")


@pytest.fixture
def elements_text() -> str:
    return load_fixture("elements_3i.txt")
