# tests/conftest.py
"""
Shared test fixtures and configuration for pytest.
"""

import logging

import pytest

from sqltk.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test with built-in settings and no config file in reach."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('HOME', str(tmp_path))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def restore_root_logger():
    """Close and remove the root logger handlers that setup_logging() adds."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def avatar_record():
    """A single Team Avatar record."""
    return {'name': 'Aang', 'nation': 'Air Nomads', 'age': 112, 'airbender': True}


@pytest.fixture
def team_avatar():
    """Batch of records with the same shape."""
    return [
        {'name': 'Aang', 'nation': 'Air Nomads', 'age': 112},
        {'name': 'Katara', 'nation': 'Water Tribe', 'age': 14},
        {'name': 'Toph', 'nation': 'Earth Kingdom', 'age': 12},
    ]
