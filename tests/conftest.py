"""Pytest fixtures for kirana tests."""

import itertools
import tempfile
from pathlib import Path

import pytest

from kirana.context import AppContext
from kirana.record_store import RecordStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    """An opened, empty record store."""
    store = RecordStore(data_dir=temp_dir)
    store.open()
    yield store
    store.close()


@pytest.fixture
def ctx(temp_dir):
    """An opened application context over a seeded store."""
    with AppContext(data_dir=temp_dir) as context:
        yield context


@pytest.fixture
def empty_ctx(temp_dir):
    """An opened application context with no sample data."""
    with AppContext(data_dir=temp_dir, seed=False) as context:
        yield context


@pytest.fixture
def unique_keys(monkeypatch):
    """Make generated record keys distinct even within one millisecond."""
    counter = itertools.count(1_700_000_000_000)
    monkeypatch.setattr("kirana.models._timestamp_ms", lambda: next(counter))
