"""Shared pytest fixtures for the sidearm test suite.

RULES:
- SIDEARM_API_KEY / SIDEARM_BASE_URL are cleared for every test so a
  developer's .env or shell settings never leak in
- Fake service and clock helpers live in _helpers.py
"""

import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("SIDEARM_API_KEY", raising=False)
    monkeypatch.delenv("SIDEARM_BASE_URL", raising=False)
