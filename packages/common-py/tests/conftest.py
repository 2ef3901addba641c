"""Pytest configuration and fixtures for common-py tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import logging
import sys
import pytest
from pathlib import Path


@pytest.fixture(scope="session", autouse=True)
def setup_test_path():
    """Ensure the package root is in the Python path.

    This makes the package importable whether tests are run from:
    - The package directory (packages/common-py)
    - The project root
    - Or after pip install
    """
    package_root = Path(__file__).parent.parent

    package_root_str = str(package_root)
    if package_root_str not in sys.path:
        sys.path.insert(0, package_root_str)

    yield


@pytest.fixture
def clean_env(monkeypatch):
    """Remove wsdeps environment overrides for the duration of a test."""
    monkeypatch.delenv("WSDEPS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("WSDEPS_LOG_FORMAT", raising=False)
    return monkeypatch


@pytest.fixture
def reset_logging():
    """Restore the wsdeps root logger after configure_logging() tests."""
    root = logging.getLogger("wsdeps")
    handlers = list(root.handlers)
    level = root.level
    propagate = root.propagate
    yield
    root.handlers = handlers
    root.setLevel(level)
    root.propagate = propagate
