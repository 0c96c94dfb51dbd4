from dataclasses import dataclass, field
from decimal import Decimal

from posada.application.schemas import StripeEvent


@dataclass
class CheckoutRequest:
    reservation_id: str
    room_name: str
    guest_name: str
    guest_email: str
    amount: Decimal
    success_url: str
    cancel_url: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class CheckoutSession:
    id: str
    url: str | None
    payment_status: str | None = None
    payment_intent_id: str | None = None
    payment_method_types: list[str] = field(default_factory=list)


class PaymentGateway:
    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        raise NotImplementedError

    def verify_notification(self, raw_body: bytes, signature_header: str | None) -> StripeEvent:
        """
        Autentica una notificación entrante y retorna el evento decodificado.

        Raises:
            WebhookNotConfiguredError: Si no hay secreto configurado.
            SignatureError: Si la cabecera, el timestamp, la firma o el cuerpo
                son inválidos.
        """
        raise NotImplementedError
