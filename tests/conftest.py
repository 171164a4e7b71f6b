"""
Pytest configuration and shared fixtures for LayeredConf tests.
"""

import logging

import pytest

from layeredconf.core.configuration import Configuration

# Configure test logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


@pytest.fixture(autouse=True)
def clear_singleton():
    """Every test starts and ends without a process-wide instance."""
    Configuration.clear_instance()
    yield
    Configuration.clear_instance()


@pytest.fixture
def default_values():
    """Default values for a small configuration."""
    return {
        "foo": "defaultFoo",
        "bar": 42,
    }


@pytest.fixture
def config(default_values):
    """Non-singleton configuration built from the default values."""
    return Configuration(default_values)


@pytest.fixture
def readonly_config():
    """Configuration with ``foo`` marked read-only."""
    return Configuration({"foo": "defaultA", "bar": 10}, {"read_only_keys": ["foo"]})


class CallRecorder:
    """Subscription callback that records every payload."""

    def __init__(self):
        self.calls: list[dict] = []

    def __call__(self, payload: dict) -> None:
        self.calls.append(payload)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last(self) -> dict:
        return self.calls[-1]


@pytest.fixture
def recorder():
    return CallRecorder()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Add default markers to tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "timing" in item.name.lower() or "interval" in item.name.lower():
            item.add_marker(pytest.mark.slow)

