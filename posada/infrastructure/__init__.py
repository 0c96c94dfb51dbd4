"""
Capa de Infraestructura - Sistema de Reservas de la Posada.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).

Estructura:
- db/: Tablas, almacenamiento SQL y reintentos ante deadlocks
- gateways/: Stripe Checkout y verificación de firmas de webhook
- gateways/in_memory/: Implementaciones in-memory para desarrollo y testing
- email/: Envío de emails con Resend
- auth/: Validación de la sesión administrativa
- circuit_breaker.py: Breaker de las llamadas a Stripe
"""

from posada.infrastructure.auth.admin_session import SharedSecretAdminGuard
from posada.infrastructure.db.repositories.reservation_store_sql import ReservationStoreSQL
from posada.infrastructure.email.resend_email_sender import LoggingEmailSender, ResendEmailSender
from posada.infrastructure.gateways.in_memory import (
    InMemoryReservationStore,
    RecordingEmailSender,
    StubPaymentGateway,
)
from posada.infrastructure.gateways.stripe_checkout_gateway import StripeCheckoutGateway
from posada.infrastructure.gateways.stripe_signature import StripeSignatureVerifier

__all__ = [
    # Database
    "ReservationStoreSQL",
    # Gateways
    "StripeCheckoutGateway",
    "StripeSignatureVerifier",
    # Email
    "ResendEmailSender",
    "LoggingEmailSender",
    # Auth
    "SharedSecretAdminGuard",
    # In-Memory (for testing)
    "InMemoryReservationStore",
    "StubPaymentGateway",
    "RecordingEmailSender",
]
