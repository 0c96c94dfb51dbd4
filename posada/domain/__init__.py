"""
Capa de Dominio - Sistema de Reservas de la Posada.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.
Incluye entidades, value objects, la máquina de estados de pago y las
excepciones de dominio.

Estructura:
- entities/: Entidades del dominio (Reservation, Guest, Room)
- value_objects/: Objetos de valor inmutables (Money, StayWindow)
- payment_transitions.py: Tabla de transiciones de pago
- errors.py: Excepciones específicas del dominio
- constants.py: Constantes del dominio
"""

from posada.domain.constants import BLOCKING_STATUSES, MANUAL_STATUSES
from posada.domain.entities import (
    Guest,
    GuestInput,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Room,
)
from posada.domain.errors import (
    AdminAuthorizationError,
    DomainError,
    GatewayError,
    InvalidDateRangeError,
    InvalidMoneyError,
    InvalidSignatureHeaderError,
    MalformedPayloadError,
    OptimisticLockError,
    PersistenceError,
    ReservationNotFoundError,
    SignatureError,
    SignatureMismatchError,
    StaleTimestampError,
    UnavailableError,
    ValidationError,
    WebhookNotConfiguredError,
)
from posada.domain.value_objects import Money, StayWindow

__all__ = [
    # Constants
    "BLOCKING_STATUSES",
    "MANUAL_STATUSES",
    # Entities
    "Guest",
    "GuestInput",
    "Room",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",
    # Value Objects
    "Money",
    "StayWindow",
    # Errors
    "DomainError",
    "ValidationError",
    "InvalidDateRangeError",
    "InvalidMoneyError",
    "UnavailableError",
    "ReservationNotFoundError",
    "OptimisticLockError",
    "GatewayError",
    "PersistenceError",
    "SignatureError",
    "InvalidSignatureHeaderError",
    "SignatureMismatchError",
    "StaleTimestampError",
    "MalformedPayloadError",
    "WebhookNotConfiguredError",
    "AdminAuthorizationError",
]
