"""
Pytest configuration for induction lab tests.

Puts src/ on sys.path and routes the lab logger to memory for every test.
"""

import os
import sys

import pytest

# Add src to sys.path for imports
_src_root = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if _src_root not in sys.path:
    sys.path.insert(0, _src_root)

from induction_lab.utils.logger import Logger, MemoryStrategy  # noqa: E402


@pytest.fixture(autouse=True)
def memory_log():
    """Capture lab log lines in memory instead of a file."""
    previous_strategy = Logger.log_storage_strategy
    previous_enabled = Logger.is_logging_enabled
    strategy = MemoryStrategy()
    Logger.set_log_storage_strategy(strategy)
    Logger.is_logging_enabled = True
    yield strategy
    Logger.set_log_storage_strategy(previous_strategy)
    Logger.is_logging_enabled = previous_enabled
