"""
Pytest configuration and shared fixtures for abibuild tests.
"""

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.libraries import clean_build_env, library_tree
from tests.fixtures.tools import fake_cargo


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "e2e: marks tests that run the CLI against fake host tools"
    )
