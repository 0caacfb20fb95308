import pytest

from test.service.cinema.fixtures import MockUnitOfWork


@pytest.fixture
def mock_uow() -> MockUnitOfWork:
    return MockUnitOfWork()
