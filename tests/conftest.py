"""
Pytest configuration and shared fixtures for the test suite.
"""

import itertools
import pytest
from datetime import datetime, timedelta

from src.backend.services.recording_session import RecordingControls, RecordingSessionProvider


@pytest.fixture
def id_factory():
    """Deterministic step/test id generator."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def clock():
    """Clock that advances one second per call."""
    start = datetime(2024, 1, 1, 12, 0, 0)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def provider():
    """Open recording session provider."""
    with RecordingSessionProvider() as session_provider:
        yield session_provider


@pytest.fixture
def controls(provider):
    """Controls using real uuid ids and the wall clock."""
    return RecordingControls(provider)


@pytest.fixture
def deterministic_controls(provider, id_factory, clock):
    """Controls with predictable ids and timestamps."""
    return RecordingControls(provider, id_factory=id_factory, clock=clock)


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Set up logging for tests."""
    import logging
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
