"""Pytest configuration for Sluice test runs."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_ENV_PREFIX = "SLUICE_"


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def isolated_sluice_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop developer SLUICE_* overrides so defaults are deterministic."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIX):
            monkeypatch.delenv(name)
