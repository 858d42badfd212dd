# tests/conftest.py
from __future__ import annotations

import pytest

from semiprimefinder import runtime


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    """Every test gets its own workspace folder and a fresh runtime."""
    ws = tmp_path / "workspace"
    monkeypatch.setenv("SEMIPRIMEFINDER_HOME", str(ws))
    monkeypatch.delenv("SEMIPRIMEFINDER_DEV", raising=False)
    runtime.reset()
    yield ws
    runtime.reset()
