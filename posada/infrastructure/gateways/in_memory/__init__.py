"""Implementaciones in-memory para desarrollo y testing."""

from posada.infrastructure.gateways.in_memory.email_sender import RecordingEmailSender, SentEmail
from posada.infrastructure.gateways.in_memory.payment_gateway import StubPaymentGateway
from posada.infrastructure.gateways.in_memory.reservation_store import InMemoryReservationStore

__all__ = [
    # Stores
    "InMemoryReservationStore",
    # Gateways
    "StubPaymentGateway",
    # Notifications
    "RecordingEmailSender",
    "SentEmail",
]
