"""
pytest configuration for pipeline composer tests.

Adds src directory to Python path for imports and resets shared state
between tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Clear logging context and the config singleton around every test."""
    from config.config import reset_config
    from core.logging.context import clear_log_context

    clear_log_context()
    reset_config()
    yield
    clear_log_context()
    reset_config()
