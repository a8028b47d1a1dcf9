from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    for name in list(os.environ):
        if name.startswith("SOLSOKER_"):
            monkeypatch.delenv(name, raising=False)
    yield
