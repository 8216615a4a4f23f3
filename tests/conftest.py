"""Shared pytest fixtures for edgeport tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from edgeport.core.schema import WorkerConfig
from edgeport.migrate import MigrationOptions, ResourceRegistry


@pytest.fixture
def registry() -> ResourceRegistry:
    """Return an empty resource registry."""
    return ResourceRegistry()


@pytest.fixture
def options() -> MigrationOptions:
    """Return default migration options."""
    return MigrationOptions()


@pytest.fixture
def make_config() -> Callable[..., WorkerConfig]:
    """Return a factory building a validated WorkerConfig from keyword fields."""

    def _make(name: str = "api", **fields: Any) -> WorkerConfig:
        return WorkerConfig.model_validate({"name": name, **fields})

    return _make


@pytest.fixture
def shop_config() -> WorkerConfig:
    """Return the single-worker shop configuration."""
    return WorkerConfig.model_validate(
        {
            "name": "shop",
            "main": "src/worker.ts",
            "kv_namespaces": [{"binding": "SESSIONS", "id": "0f2ac74b498b48028cb68387c421e279"}],
            "vars": {"DEBUG": "true", "AUTH_TOKEN": "xyz"},
        }
    )


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing a configuration file into tmp_path."""

    def _write(filename: str, content: str) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
