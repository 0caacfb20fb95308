from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_payment_gateway import IPaymentGateway
from src.service.cinema.domain.errors import PaymentDeclinedError


class MockPaymentGatewayImpl(IPaymentGateway):
    """
    Stand-in for the card processor.

    Intent ids look like the processor's (`pi_...`); an id ending in `_fail`
    simulates a declined card.
    """

    INTENT_PREFIX = 'pi_'
    DECLINE_SUFFIX = '_fail'

    @Logger.io
    async def assert_payment_succeeded(self, *, payment_intent_id: str, booking_id: int) -> None:
        if not payment_intent_id.startswith(self.INTENT_PREFIX):
            raise PaymentDeclinedError(f'Unknown payment intent for booking {booking_id}')
        if payment_intent_id.endswith(self.DECLINE_SUFFIX):
            raise PaymentDeclinedError(f'Payment declined for booking {booking_id}')

        Logger.base.info(f'💰 [PAYMENT] Intent accepted for booking {booking_id}')
