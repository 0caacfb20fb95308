"""
Unit of Work Pattern - manages the database session and repositories together

Architecture:
- UoW owns the session lifecycle (opened on enter, closed on exit)
- UoW owns commit/rollback; leaving the block without commit rolls back
- Repositories receive the UoW's shared session
- Use cases coordinate several repositories through one UoW
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


if TYPE_CHECKING:
    from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
    from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
    from src.service.cinema.app.interface.i_promotion_command_repo import (
        IPromotionCommandRepo,
    )
    from src.service.cinema.app.interface.i_promotion_query_repo import IPromotionQueryRepo
    from src.service.cinema.app.interface.i_showtime_query_repo import IShowtimeQueryRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the cinema booking service

    Usage:
        async with uow_factory() as uow:
            booking = await uow.booking_command_repo.create_hold(...)
            await uow.commit()
    """

    # Catalog (read-only)
    showtime_query_repo: IShowtimeQueryRepo

    # Booking repositories
    booking_command_repo: IBookingCommandRepo
    booking_query_repo: IBookingQueryRepo

    # Promotion repositories
    promotion_command_repo: IPromotionCommandRepo
    promotion_query_repo: IPromotionQueryRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    Each `async with` opens a fresh session from the factory, so one UoW
    instance maps to exactly one transaction.
    """

    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from src.service.cinema.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from src.service.cinema.driven_adapter.repo.booking_query_repo_impl import (
            BookingQueryRepoImpl,
        )
        from src.service.cinema.driven_adapter.repo.promotion_command_repo_impl import (
            PromotionCommandRepoImpl,
        )
        from src.service.cinema.driven_adapter.repo.promotion_query_repo_impl import (
            PromotionQueryRepoImpl,
        )
        from src.service.cinema.driven_adapter.repo.showtime_query_repo_impl import (
            ShowtimeQueryRepoImpl,
        )

        self.session = self._session_factory()

        self.showtime_query_repo = ShowtimeQueryRepoImpl(session=self.session)
        self.booking_command_repo = BookingCommandRepoImpl(session=self.session)
        self.booking_query_repo = BookingQueryRepoImpl(session=self.session)
        self.promotion_command_repo = PromotionCommandRepoImpl(session=self.session)
        self.promotion_query_repo = PromotionQueryRepoImpl(session=self.session)

        await super().__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    async def _commit(self) -> None:
        assert self.session is not None, 'UnitOfWork used outside of `async with`'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
