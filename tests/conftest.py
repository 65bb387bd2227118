"""Pytest configuration and fixtures for hakbuild tests.

Addresses Python 3.13 compatibility issues with pytest's capture fixtures:
stdout/stderr can end up closed during teardown when a test raises.
See https://github.com/pytest-dev/pytest/issues/11439
"""

import sys
import warnings

import pytest

# Suppress ResourceWarnings from file cleanup in Python 3.13
if sys.version_info >= (3, 13):
    warnings.filterwarnings("ignore", category=ResourceWarning)


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__
