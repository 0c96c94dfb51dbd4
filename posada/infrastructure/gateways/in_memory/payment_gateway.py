from uuid import uuid4

from posada.application.interfaces.payment_gateway import (
    CheckoutRequest,
    CheckoutSession,
    PaymentGateway,
)
from posada.application.schemas import StripeEvent
from posada.domain.errors import GatewayError
from posada.domain.value_objects import Money
from posada.infrastructure.gateways.stripe_signature import StripeSignatureVerifier


class StubPaymentGateway(PaymentGateway):
    """
    Pasarela simulada: crea sesiones con URL ficticia y verifica firmas con
    el mismo SDK que la real.
    """

    def __init__(
        self,
        webhook_secret: str | None = None,
        tolerance_seconds: int = 300,
        payment_method_types: list[str] | None = None,
    ) -> None:
        self.requests: list[CheckoutRequest] = []
        self.fail_with: Exception | None = None
        self.return_url = True
        self.payment_status = "unpaid"
        self._payment_method_types = payment_method_types or ["card", "pix"]
        self._verifier = StripeSignatureVerifier(
            secret=webhook_secret, tolerance_seconds=tolerance_seconds
        )

    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        Money(amount=request.amount).to_minor_units()
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        session_id = f"cs_test_{uuid4().hex[:24]}"
        return CheckoutSession(
            id=session_id,
            url=f"https://checkout.stripe.test/c/pay/{session_id}" if self.return_url else None,
            payment_status=self.payment_status,
            payment_intent_id=None,
            payment_method_types=list(self._payment_method_types),
        )

    def fail_next_checkout(self, error: Exception | None = None) -> None:
        self.fail_with = error or GatewayError("Stripe simulado no disponible", http_status=503)

    def verify_notification(self, raw_body: bytes, signature_header: str | None) -> StripeEvent:
        return self._verifier.verify(raw_body, signature_header)
