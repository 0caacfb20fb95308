from abc import ABC, abstractmethod


class IPaymentGateway(ABC):
    @abstractmethod
    async def assert_payment_succeeded(self, *, payment_intent_id: str, booking_id: int) -> None:
        """
        Verify with the payment provider that the intent was captured for this booking

        Raises:
            PaymentDeclinedError: the provider did not report a successful payment
        """
        pass
