# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from taskerie.config import Settings
from taskerie.engine import Engine
from taskerie.loader import loads
from taskerie.tasks.registry import TaskRegistry

from .fakes import FakeExecutor, RecordingSink


@pytest.fixture()
def settings() -> Settings:
    """Settings built explicitly so a developer's environment cannot leak in."""
    return Settings(shell=None, output_encoding="utf-8", log_level="DEBUG", log_format="console")


@pytest.fixture()
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def make_registry(tmp_path: Path) -> Callable[[str], TaskRegistry]:
    """Build a registry from YAML text, rooted in the test's tmp directory."""

    def _make(text: str) -> TaskRegistry:
        return loads(text, base_directory=tmp_path)

    return _make


@pytest.fixture()
def make_engine(make_registry, executor: FakeExecutor) -> Callable[[str], Engine]:
    def _make(text: str) -> Engine:
        return Engine(make_registry(text), executor)

    return _make
