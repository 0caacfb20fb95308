"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: builds one engine per database URL with event loop awareness
2. Database: the injectable store handle used by units of work and the app lifespan
3. Base: declarative base shared by every ORM model

Backends:
- postgresql+asyncpg: production, pooled connections
- sqlite+aiosqlite: local runs and tests; writers are serialised with BEGIN IMMEDIATE
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.engine.interfaces import DBAPIConnection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# =============================================================================
# Base Model
# =============================================================================


class Base(DeclarativeBase):
    pass


# =============================================================================
# Event-loop-aware Engine Manager
# =============================================================================


def _enable_sqlite_immediate_transactions(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy own the SQLite transaction boundary.

    pysqlite defers BEGIN until the first write, so two transactions could both
    read seat occupancy before either takes the write lock. Emitting
    BEGIN IMMEDIATE takes the lock up front and the second writer waits.
    """

    @event.listens_for(engine.sync_engine, 'connect')
    def _on_connect(dbapi_connection: DBAPIConnection, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None  # type: ignore[attr-defined]
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    @event.listens_for(engine.sync_engine, 'begin')
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql('BEGIN IMMEDIATE')


class AsyncEngineManager:
    """
    Manages a SQLAlchemy async engine bound to the running event loop.

    Ensures the engine is rebuilt when the loop changes to prevent
    "Task got Future attached to a different loop" errors (pytest-asyncio
    creates a fresh loop per test).
    """

    def __init__(self, *, url: str, echo: bool = False) -> None:
        self._url = url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_sqlite(self) -> bool:
        return self._url.startswith('sqlite')

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        if self._loop is not current_loop:
            if self._engine is not None and self._loop is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, rebuilding engine...')
                self._session_maker = None
            self._engine = self._create_engine()
            self._loop = current_loop

        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None or self._session_maker.kw.get('bind') is not engine:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._loop = None
        self._session_maker = None

    def _create_engine(self) -> AsyncEngine:
        if self.is_sqlite:
            engine = create_async_engine(
                self._url,
                echo=self._echo,
                connect_args={'timeout': settings.SQLITE_BUSY_TIMEOUT},
            )
            _enable_sqlite_immediate_transactions(engine)
            Logger.base.info(f'🔗 [DB] SQLite engine created for {self._url}')
            return engine

        Logger.base.info('🔗 [DB] PostgreSQL engine created')
        return create_async_engine(
            self._url,
            echo=self._echo,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


# =============================================================================
# Database Class (for DI)
# =============================================================================


class Database:
    """
    Store handle constructed explicitly and injected through the DI container.

    Usage:
        database = Database(url='sqlite+aiosqlite:///./cinema.db')
        await database.create_tables()
        async with database.session() as session:
            ...
    """

    def __init__(self, *, url: str, echo: bool = False) -> None:
        self._engine_manager = AsyncEngineManager(url=url, echo=echo)

    @property
    def url(self) -> str:
        return self._engine_manager.url

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        return self._engine_manager.get_session_maker()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for database sessions; rolls back on exception"""
        async with self.session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create database tables if they don't exist"""
        # Registers every model on Base.metadata
        import src.service.cinema.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️  [DB] Tables ensured')

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
