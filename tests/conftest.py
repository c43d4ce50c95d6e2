"""
Pytest configuration and shared fixtures.

Puts ``src`` on the import path and installs a quiet logging config so test
output only shows warnings and errors.
"""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Configure test environment
os.environ['ENVIRONMENT'] = 'test'

from kraken_client.infrastructure.logging import get_logger
from kraken_client.infrastructure.logging.factory import LoggerFactory
from kraken_client.infrastructure.logging.structs import LoggingConfig, ConsoleBackendConfig

from fakes import FakeClock, FakeSleep


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up test-appropriate logging configuration."""
    LoggerFactory.configure(LoggingConfig(
        environment="test",
        console=ConsoleBackendConfig(enabled=True, min_level="WARNING"),
        propagate=False,
    ))
    yield
    LoggerFactory.clear_cache()


@pytest.fixture
def logger():
    """Provide HFT logger for tests."""
    return get_logger("test")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sleep(clock):
    return FakeSleep(clock)
