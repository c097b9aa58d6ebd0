"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def store():
    from stored_lib.store import KeyValueStore
    return KeyValueStore()


@pytest.fixture
def shared_store(monkeypatch):
    """Install a fresh in-memory store as the process-wide shared store."""
    from stored_lib import store as store_module
    s = store_module.KeyValueStore()
    monkeypatch.setattr(store_module, "_shared_store", s)
    return s
