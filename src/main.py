"""
Production FastAPI Application

Booking API plus the expiry reaper running in the lifespan task group.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.cinema.driving_adapter.background.expiry_reaper import ExpiryReaper


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Cinema Booking] Starting up...')

    tracing = TracingConfig(service_name='cinema-booking')
    tracing.setup()

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Cinema Booking] Dependency injection wired')

    database = container.database()
    await database.create_tables()
    if tracing.is_exporting:
        tracing.instrument_sqlalchemy(engine=database.engine)
    Logger.base.info('🗄️  [Cinema Booking] Database ready')

    async with anyio.create_task_group() as tg:
        container.task_group.override(tg)

        if settings.REAPER_ENABLED:
            await ExpiryReaper.from_container(container).start(task_group=tg)
        else:
            Logger.base.warning('⚠️ [Cinema Booking] Expiry reaper disabled')

        Logger.base.info('✅ [Cinema Booking] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Cinema Booking] Shutting down...')
        tg.cancel_scope.cancel()

    container.task_group.reset_override()

    await database.dispose()
    Logger.base.info('🗄️  [Cinema Booking] Database disposed')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Cinema Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
