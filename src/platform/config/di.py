"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.cinema.driven_adapter.notification.logging_notification_dispatcher_impl import (
    LoggingNotificationDispatcherImpl,
)
from src.service.cinema.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (engine is built lazily on the running event loop)
    database = providers.Singleton(
        Database,
        url=config_service.provided.DATABASE_URL,
        echo=config_service.provided.DB_ECHO,
    )

    # One UoW per call; inject `uow_factory.provider` to get the factory itself
    uow_factory = providers.Factory(
        SqlAlchemyUnitOfWork,
        session_factory=database.provided.session_maker,
    )

    # External collaborators
    notification_dispatcher = providers.Singleton(LoggingNotificationDispatcherImpl)
    payment_gateway = providers.Singleton(MockPaymentGatewayImpl)

    # Background task group (set by main.py lifespan)
    task_group = providers.Object(None)


container = Container()


def cleanup() -> None:
    container.reset_singletons()
