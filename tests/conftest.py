"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Ensures the project root is available on ``sys.path`` for imports.
- Arms a per-test alarm so a hung coroutine fails the test instead of
  blocking the run.
"""

import os
import signal
import sys

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests
from pathlib import Path

import pytest

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

_TEST_TIMEOUT = int(os.environ.get("PYTEST_TEST_TIMEOUT", "10"))


def _timeout_handler(signum, frame):
    """Test Timeout handler."""
    raise TimeoutError(f"Test exceeded {_TEST_TIMEOUT} seconds timeout")


def pytest_runtest_setup(item):
    """Test Pytest runtest setup."""
    try:
        signal.signal(signal.SIGALRM, _timeout_handler)
        signal.alarm(_TEST_TIMEOUT)
    except (AttributeError, ValueError):
        pass


def pytest_runtest_teardown(item, nextitem):
    """Test Pytest runtest teardown."""
    try:
        signal.alarm(0)
    except (AttributeError, ValueError):
        pass


@pytest.fixture(autouse=True)
def _isolated_bake_env(monkeypatch, tmp_path):
    """Keep the developer's `.env` and bake variables out of every test."""
    import sitebake.config as cfg

    monkeypatch.setattr(cfg, "PROJECT_ROOT", tmp_path)
    for name in (
        "WORDPRESS_DIR",
        "BAKED_SITE_DIR",
        "BAKED_GRAPHER_URL",
        "RENDER_ENDPOINT",
        "RENDER_API_KEY",
        "MAX_CONCURRENT_RENDERS",
        "TARGET_RPM",
        "MAX_RETRIES",
        "BACKOFF_FACTOR",
        "RETRY_SLEEP_ON_429",
        "REQUEST_TIMEOUT",
        "EXPORT_WAIT_TIMEOUT",
        "POSTS_PER_PAGE",
    ):
        monkeypatch.delenv(name, raising=False)
