"""Entidad Reservation - Agregado raíz del dominio."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from posada.domain.value_objects.stay_window import StayWindow


class ReservationStatus(str, Enum):
    """Estados del ciclo de vida de una reservación."""

    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Estado del pago visto desde la pasarela."""

    NOT_STARTED = "not_started"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass
class Reservation:
    """
    Entidad principal del dominio - Agregado Raíz.

    Representa la estancia de un huésped en una habitación, junto con el
    vínculo hacia la sesión de checkout de la pasarela de pago.
    """

    # Identificadores
    id: str
    room_id: str
    guest_id: str

    # Estancia (intervalo semiabierto [check_in, check_out))
    check_in: date
    check_out: date
    occupancy: int

    # Financieros
    total_amount: Decimal

    # Estados
    status: ReservationStatus = ReservationStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING

    # Vínculo con la pasarela
    checkout_session_id: str | None = None
    payment_intent_id: str | None = None
    payment_method: str | None = None
    payment_approved_at: datetime | None = None

    notes: str | None = None

    # Control de concurrencia
    lock_version: int = 0

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Propiedades calculadas ===

    @property
    def stay_window(self) -> StayWindow:
        """Retorna la estancia como Value Object."""
        return StayWindow(start=self.check_in, end=self.check_out)

    @property
    def nights(self) -> int:
        return self.stay_window.nights

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED
