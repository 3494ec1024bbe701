"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
large_scale
    Applied to tests that transform arrays large enough to take several
    seconds on the pure-Python backend.  Opt out with ``-m 'not large_scale'``.

Warning filters
---------------
NumbaPerformanceWarning messages are filtered out during tests. These warnings
about GPU under-utilization are expected with small test data and are not
informative for correctness testing.
"""

import pytest
import warnings


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs before any test modules are imported, which is important for
    catching warnings from numba kernel compilation.
    """
    config.addinivalue_line(
        "markers",
        "large_scale: large arrays, slow on the python backend "
        "(skip with -m 'not large_scale')",
    )

    try:
        from numba.core.errors import NumbaPerformanceWarning
        warnings.filterwarnings('ignore', category=NumbaPerformanceWarning)
    except ImportError:
        pass


def pytest_unconfigure(config):
    """Restore default warning behavior."""
    warnings.resetwarnings()
