import asyncio
import logging
from datetime import timedelta

import stripe

from posada.application.interfaces.clock import Clock
from posada.application.interfaces.payment_gateway import (
    CheckoutRequest,
    CheckoutSession,
    PaymentGateway,
)
from posada.application.schemas import StripeEvent
from posada.config import Settings
from posada.domain.errors import GatewayError
from posada.domain.value_objects import Money
from posada.infrastructure.circuit_breaker import CircuitBreakerError, stripe_breaker
from posada.infrastructure.gateways.stripe_signature import StripeSignatureVerifier

logger = logging.getLogger(__name__)

SUPPORTED_PAYMENT_METHODS = ("card", "pix", "boleto")
FALLBACK_PAYMENT_METHODS = ["card"]


def parse_payment_method_types(raw: str | None) -> list[str]:
    """`"card, PIX,foo,card"` -> `["card", "pix"]`; vacío o sin soportados -> `["card"]`."""
    methods: list[str] = []
    for item in (raw or "").split(","):
        method = item.strip().lower()
        if method in SUPPORTED_PAYMENT_METHODS and method not in methods:
            methods.append(method)
    return methods or list(FALLBACK_PAYMENT_METHODS)


def is_payment_method_config_error(error: Exception) -> bool:
    if not isinstance(error, stripe.InvalidRequestError):
        return False
    param = (getattr(error, "param", None) or "").lower()
    message = (getattr(error, "user_message", None) or str(error) or "").lower()
    return (
        "payment_method_types" in param
        or "payment_method_types" in message
        or "payment method" in message
        or "pix" in message
    )


def _payment_intent_id(value) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return getattr(value, "id", None)


class StripeCheckoutGateway(PaymentGateway):
    """Stripe Checkout vía SDK oficial, protegido por el circuit breaker."""

    def __init__(self, settings: Settings, clock: Clock) -> None:
        self._api_key = settings.stripe_api_key
        self._currency = settings.stripe_currency.lower()
        self._locale = settings.stripe_checkout_locale
        self._expiry = timedelta(minutes=settings.checkout_expiry_minutes)
        self._payment_methods = parse_payment_method_types(settings.stripe_payment_method_types)
        self._clock = clock
        self._verifier = StripeSignatureVerifier(
            secret=settings.stripe_webhook_secret,
            tolerance_seconds=settings.stripe_webhook_tolerance_seconds,
        )
        # Retry failed requests at the SDK level before counting a breaker failure
        stripe.max_network_retries = settings.stripe_max_network_retries

    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        if not self._api_key:
            raise GatewayError("STRIPE_SECRET_KEY no configurada")
        unit_amount = Money(amount=request.amount, currency_code=self._currency.upper()).to_minor_units()

        try:
            return await self._create_session(request, unit_amount, self._payment_methods)
        except stripe.StripeError as exc:
            if (
                self._payment_methods != FALLBACK_PAYMENT_METHODS
                and "card" in self._payment_methods
                and is_payment_method_config_error(exc)
            ):
                logger.warning(
                    "Stripe rejected payment methods, retrying with card only",
                    extra={
                        "reservation_id": request.reservation_id,
                        "payment_methods": self._payment_methods,
                        "error": str(exc),
                    },
                )
                try:
                    return await self._create_session(request, unit_amount, FALLBACK_PAYMENT_METHODS)
                except stripe.StripeError as retry_exc:
                    raise self._gateway_error(request, retry_exc) from retry_exc
                except CircuitBreakerError as retry_exc:
                    raise self._breaker_open(request, retry_exc) from retry_exc
            raise self._gateway_error(request, exc) from exc
        except CircuitBreakerError as exc:
            raise self._breaker_open(request, exc) from exc

    async def _create_session(
        self, request: CheckoutRequest, unit_amount: int, payment_methods: list[str]
    ) -> CheckoutSession:
        expires_at = self._clock.now() + self._expiry
        params = {
            "mode": "payment",
            "locale": self._locale,
            "payment_method_types": payment_methods,
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "customer_email": request.guest_email,
            "client_reference_id": request.reservation_id,
            "billing_address_collection": "required",
            "expires_at": int(expires_at.timestamp()),
            "line_items": [
                {
                    "quantity": 1,
                    "price_data": {
                        "currency": self._currency,
                        "unit_amount": unit_amount,
                        "product_data": {
                            "name": f"Reserva - {request.room_name}",
                            "description": f"Reserva {request.reservation_id}",
                        },
                    },
                }
            ],
            "metadata": dict(request.metadata),
            "payment_intent_data": {"metadata": dict(request.metadata)},
        }
        idempotency_key = f"checkout-{request.reservation_id}-{'-'.join(payment_methods)}"

        # stripe does not have an async client; run the sync call in a worker thread
        session = await asyncio.to_thread(
            stripe_breaker.call,
            stripe.checkout.Session.create,
            api_key=self._api_key,
            idempotency_key=idempotency_key,
            **params,
        )
        logger.info(
            "Stripe checkout session created",
            extra={"reservation_id": request.reservation_id, "checkout_session_id": session.id},
        )
        return CheckoutSession(
            id=session.id,
            url=getattr(session, "url", None),
            payment_status=getattr(session, "payment_status", None),
            payment_intent_id=_payment_intent_id(getattr(session, "payment_intent", None)),
            payment_method_types=list(getattr(session, "payment_method_types", None) or payment_methods),
        )

    def _gateway_error(self, request: CheckoutRequest, exc: stripe.StripeError) -> GatewayError:
        logger.error(
            "Stripe API error",
            exc_info=exc,
            extra={"reservation_id": request.reservation_id},
        )
        return GatewayError(
            f"Stripe rechazó la sesión de checkout: {getattr(exc, 'user_message', None) or exc}",
            http_status=getattr(exc, "http_status", None),
        )

    def _breaker_open(self, request: CheckoutRequest, exc: CircuitBreakerError) -> GatewayError:
        logger.error(
            "Stripe circuit breaker is open - service unavailable",
            extra={"reservation_id": request.reservation_id, "circuit_state": str(exc)},
        )
        return GatewayError("Stripe no disponible temporalmente", http_status=503)

    def verify_notification(self, raw_body: bytes, signature_header: str | None) -> StripeEvent:
        return self._verifier.verify(raw_body, signature_header)
