"""
Capa de Aplicación - Sistema de Reservas de la Posada.

Esta capa contiene los casos de uso, los esquemas de eventos entrantes y las
interfaces (puertos). Orquesta la lógica de negocio y define los contratos
con la infraestructura.

Estructura:
- use_cases/: Casos de uso del sistema
- interfaces/: Puertos (contratos para adaptadores)
- schemas.py: Schemas Pydantic de los eventos de Stripe
"""

from posada.application.interfaces import (
    AdminGuard,
    BookingEmail,
    CheckoutRequest,
    CheckoutSession,
    Clock,
    EmailSender,
    FakeClock,
    FakeUUIDGenerator,
    PaymentGateway,
    RealUUIDGenerator,
    ReservationStore,
    ReservationWithGuest,
    SystemClock,
    UUIDGenerator,
)
from posada.application.schemas import CheckoutSessionObject, StripeEvent

__all__ = [
    # Schemas
    "StripeEvent",
    "CheckoutSessionObject",
    # Interfaces - Stores
    "ReservationStore",
    "ReservationWithGuest",
    # Interfaces - Gateways
    "PaymentGateway",
    "CheckoutRequest",
    "CheckoutSession",
    # Interfaces - Notifications
    "EmailSender",
    "BookingEmail",
    "AdminGuard",
    # Interfaces - Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
