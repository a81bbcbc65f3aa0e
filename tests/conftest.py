"""Pytest configuration and shared fixtures."""

import sys

import pytest
from loguru import logger

from notescore.config import get_settings
from tests.fixtures.note_fixtures import (
    factual_note,
    health_scenario,
    ideal_config,
    ideal_note,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore a single stderr loguru handler after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr, level='WARNING')


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Isolate tests from NOTESCORE_* variables and cached settings."""
    monkeypatch.delenv('NOTESCORE_PASSING_THRESHOLD', raising=False)
    monkeypatch.delenv('NOTESCORE_MAX_WORKERS', raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def perfect_note():
    return ideal_note()


@pytest.fixture
def empty_note():
    return factual_note()


@pytest.fixture
def goal_config():
    return ideal_config()


@pytest.fixture
def scenario():
    return health_scenario()
