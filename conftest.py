"""
Pytest configuration and fixtures.

This file puts the project root on the import path so the tests can
import the package without installing it.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks tests that run the full sampling budget")
