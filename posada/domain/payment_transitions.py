"""
Máquina de estados de pago de una reservación.

Cada categoría de evento de la pasarela se asocia a una de tres operaciones
idempotentes (aprobar, marcar pendiente, marcar fallida). La guarda de cada
operación es una precondición explícita: si se cumple, el evento se ignora.
Aplicar la misma operación varias veces produce el mismo estado final.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from posada.domain.entities.reservation import PaymentStatus, Reservation, ReservationStatus


class PaymentEventCategory(str, Enum):
    CHECKOUT_COMPLETED_PAID = "checkout_completed_paid"
    CHECKOUT_COMPLETED_UNPAID = "checkout_completed_unpaid"
    ASYNC_PAYMENT_SUCCEEDED = "async_payment_succeeded"
    ASYNC_PAYMENT_FAILED = "async_payment_failed"
    CHECKOUT_EXPIRED = "checkout_expired"


class PaymentOperation(str, Enum):
    APPROVE_PAYMENT = "approve_payment"
    MARK_PENDING = "mark_pending"
    MARK_FAILED = "mark_failed"


def _never(reservation: Reservation) -> bool:
    return False


def _paid_or_confirmed(reservation: Reservation) -> bool:
    return reservation.is_paid or reservation.is_confirmed


def _paid(reservation: Reservation) -> bool:
    return reservation.is_paid


@dataclass(frozen=True)
class Transition:
    """Fila de la tabla de transiciones."""

    operation: PaymentOperation
    skip_when: Callable[[Reservation], bool]
    payment_status: PaymentStatus
    status: ReservationStatus | None = None
    approves: bool = False
    clears_approval: bool = False


APPROVE = Transition(
    operation=PaymentOperation.APPROVE_PAYMENT,
    skip_when=_never,
    status=ReservationStatus.CONFIRMED,
    payment_status=PaymentStatus.PAID,
    approves=True,
)

MARK_PENDING = Transition(
    operation=PaymentOperation.MARK_PENDING,
    skip_when=_paid_or_confirmed,
    payment_status=PaymentStatus.PENDING,
)

MARK_FAILED = Transition(
    operation=PaymentOperation.MARK_FAILED,
    skip_when=_paid,
    status=ReservationStatus.CANCELLED,
    payment_status=PaymentStatus.FAILED,
    clears_approval=True,
)

MARK_EXPIRED = Transition(
    operation=PaymentOperation.MARK_FAILED,
    skip_when=_paid,
    status=ReservationStatus.CANCELLED,
    payment_status=PaymentStatus.EXPIRED,
    clears_approval=True,
)

PAYMENT_TRANSITIONS: dict[PaymentEventCategory, Transition] = {
    PaymentEventCategory.CHECKOUT_COMPLETED_PAID: APPROVE,
    PaymentEventCategory.CHECKOUT_COMPLETED_UNPAID: MARK_PENDING,
    PaymentEventCategory.ASYNC_PAYMENT_SUCCEEDED: APPROVE,
    PaymentEventCategory.ASYNC_PAYMENT_FAILED: MARK_FAILED,
    PaymentEventCategory.CHECKOUT_EXPIRED: MARK_EXPIRED,
}


def classify_event(event_type: str, session_payment_status: str | None) -> PaymentEventCategory | None:
    """Traduce el tipo de evento de Stripe a una categoría; None si no se maneja."""
    if event_type == "checkout.session.completed":
        if session_payment_status == "paid":
            return PaymentEventCategory.CHECKOUT_COMPLETED_PAID
        return PaymentEventCategory.CHECKOUT_COMPLETED_UNPAID
    if event_type == "checkout.session.async_payment_succeeded":
        return PaymentEventCategory.ASYNC_PAYMENT_SUCCEEDED
    if event_type == "checkout.session.async_payment_failed":
        return PaymentEventCategory.ASYNC_PAYMENT_FAILED
    if event_type == "checkout.session.expired":
        return PaymentEventCategory.CHECKOUT_EXPIRED
    return None


@dataclass
class TransitionPlan:
    """Resultado de evaluar una transición contra el estado actual."""

    operation: PaymentOperation
    skipped: bool = False
    changes: dict[str, Any] = field(default_factory=dict)
    notify_guest: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


def plan_transition(
    category: PaymentEventCategory,
    reservation: Reservation,
    linkage: dict[str, Any],
    now: datetime,
) -> TransitionPlan:
    """
    Calcula los cambios que la categoría de evento aplica a la reservación.

    Args:
        category: Categoría del evento recibido.
        reservation: Estado actual leído del almacenamiento.
        linkage: Identificadores de la pasarela (session, intent, método). Los
            valores None no sobrescriben los ya guardados.
        now: Instante usado para payment_approved_at.

    Returns:
        TransitionPlan con solo los campos que cambian. `skipped` indica que la
        guarda impidió la transición.
    """
    transition = PAYMENT_TRANSITIONS[category]
    if transition.skip_when(reservation):
        return TransitionPlan(operation=transition.operation, skipped=True)

    target: dict[str, Any] = {
        key: value for key, value in linkage.items() if value is not None
    }
    target["payment_status"] = transition.payment_status
    if transition.status is not None:
        target["status"] = transition.status
    if transition.approves and (not reservation.is_paid or reservation.payment_approved_at is None):
        target["payment_approved_at"] = now
    if transition.clears_approval:
        target["payment_approved_at"] = None

    changes = {
        key: value for key, value in target.items() if getattr(reservation, key) != value
    }
    notify_guest = transition.approves and not (reservation.is_paid or reservation.is_confirmed)
    return TransitionPlan(
        operation=transition.operation,
        changes=changes,
        notify_guest=notify_guest,
    )
