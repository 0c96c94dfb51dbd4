"""Interfaces (Puertos) de la capa de aplicación."""

from posada.application.interfaces.admin_guard import AdminGuard
from posada.application.interfaces.clock import Clock, FakeClock, SystemClock
from posada.application.interfaces.email_sender import BookingEmail, EmailSender
from posada.application.interfaces.payment_gateway import (
    CheckoutRequest,
    CheckoutSession,
    PaymentGateway,
)
from posada.application.interfaces.reservation_store import (
    ReservationStore,
    ReservationWithGuest,
)
from posada.application.interfaces.uuid_generator import (
    FakeUUIDGenerator,
    RealUUIDGenerator,
    UUIDGenerator,
)

__all__ = [
    # Stores
    "ReservationStore",
    "ReservationWithGuest",
    # Gateways
    "PaymentGateway",
    "CheckoutRequest",
    "CheckoutSession",
    # Notifications
    "EmailSender",
    "BookingEmail",
    # Authorization
    "AdminGuard",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
