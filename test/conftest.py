"""
Test Configuration

Environment variables are set before any application module is imported,
because settings and the logger read them at import time.

Architecture:
- Unit tests (test/**/unit/): mocked repositories through AsyncMock
- Integration tests (test/**/integration/): a fresh SQLite file database per test
"""

import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('DATABASE_URL', f'sqlite+aiosqlite:///{test_log_dir / "api_test.db"}')
    os.environ['REAPER_ENABLED'] = 'false'
    os.environ.setdefault('LOG_TO_FILE', 'false')
    os.environ.setdefault('SQLITE_BUSY_TIMEOUT', '30')


_early_setup_test_environment()

import pytest  # noqa: E402


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Tag tests by directory so `-m unit` / `-m integration` work without per-file marks"""
    for item in items:
        path = str(item.path)
        if '/unit/' in path and 'unit' not in item.keywords:
            item.add_marker(pytest.mark.unit)
        elif '/integration/' in path and 'integration' not in item.keywords:
            item.add_marker(pytest.mark.integration)
