"""
Pytest configuration shared by unit and integration tests.

Keeps a developer's own MWA_* settings from leaking into test runs.
"""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_mwa_env(monkeypatch):
    """Strip MWA_* variables for the duration of each test."""
    for name in [n for n in os.environ if n.startswith("MWA_")]:
        monkeypatch.delenv(name)
