from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.confirm_booking_use_case import ConfirmBookingUseCase
from src.service.cinema.app.dto.booking_dto import BookingView
from src.service.cinema.app.interface.i_payment_gateway import IPaymentGateway
from src.service.cinema.domain.entity.booking_entity import PaymentMethod
from src.service.cinema.domain.value_object.request_context import RequestContext


class PayBookingUseCase:
    """
    Card payment path: verify the payment intent with the gateway, then confirm.

    The gateway call happens before any transaction is opened; a declined
    payment leaves the booking pending so the customer can retry until the
    hold runs out.
    """

    def __init__(
        self,
        *,
        payment_gateway: IPaymentGateway,
        confirm_booking_use_case: ConfirmBookingUseCase,
    ) -> None:
        self.payment_gateway = payment_gateway
        self.confirm_booking_use_case = confirm_booking_use_case

    @classmethod
    @inject
    def depends(
        cls,
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        confirm_booking_use_case: ConfirmBookingUseCase = Depends(ConfirmBookingUseCase.depends),
    ) -> Self:
        return cls(
            payment_gateway=payment_gateway, confirm_booking_use_case=confirm_booking_use_case
        )

    @Logger.io
    async def execute(
        self, *, booking_id: int, context: RequestContext, payment_intent_id: str
    ) -> BookingView:
        await self.payment_gateway.assert_payment_succeeded(
            payment_intent_id=payment_intent_id, booking_id=booking_id
        )
        return await self.confirm_booking_use_case.execute(
            booking_id=booking_id, context=context, payment_method=PaymentMethod.CARD
        )
