"""Verificación de la cabecera Stripe-Signature de los webhooks."""

import json
import logging

import stripe
from pydantic import ValidationError as PydanticValidationError

from posada.application.schemas import StripeEvent
from posada.domain.errors import (
    InvalidSignatureHeaderError,
    MalformedPayloadError,
    SignatureError,
    SignatureMismatchError,
    StaleTimestampError,
    WebhookNotConfiguredError,
)

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


def _signature_error(exc: stripe.SignatureVerificationError, tolerance_seconds: int) -> SignatureError:
    """Traduce el error del SDK al error de dominio equivalente."""
    message = str(exc.user_message or exc)
    if message.startswith("Timestamp outside the tolerance zone"):
        return StaleTimestampError(tolerance_seconds)
    if message.startswith("Unable to extract timestamp") or "expected scheme" in message:
        return InvalidSignatureHeaderError()
    return SignatureMismatchError()


class StripeSignatureVerifier:
    """Autentica notificaciones con `stripe.WebhookSignature` del SDK oficial."""

    def __init__(
        self,
        secret: str | None,
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    ) -> None:
        self._secret = secret
        self._tolerance_seconds = tolerance_seconds

    def verify(self, raw_body: bytes, signature_header: str | None) -> StripeEvent:
        """
        Autentica el cuerpo crudo y lo decodifica como evento.

        Raises:
            WebhookNotConfiguredError: Sin secreto configurado nunca se acepta nada.
            InvalidSignatureHeaderError, StaleTimestampError,
            SignatureMismatchError, MalformedPayloadError
        """
        if not self._secret:
            raise WebhookNotConfiguredError()
        if not signature_header:
            raise InvalidSignatureHeaderError("Falta la cabecera Stripe-Signature")

        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError() from exc

        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature_header,
                self._secret,
                tolerance=self._tolerance_seconds,
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe webhook signature rejected", extra={"reason": str(exc)})
            raise _signature_error(exc, self._tolerance_seconds) from exc

        try:
            return StripeEvent.model_validate(json.loads(payload))
        except (ValueError, PydanticValidationError) as exc:
            raise MalformedPayloadError() from exc
