"""
Pytest configuration for cinema booking tests.

Re-exports shared fixtures from test/service/cinema/fixtures.py
"""

from test.service.cinema.fixtures import (
    cinema,
    clock,
    database,
    notification_dispatcher,
    services,
    uow_factory,
)

__all__ = [
    'cinema',
    'clock',
    'database',
    'notification_dispatcher',
    'services',
    'uow_factory',
]
