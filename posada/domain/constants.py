from posada.domain.entities.reservation import PaymentStatus, ReservationStatus

# Estados que ocupan la habitación para nuevas reservas
BLOCKING_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})

# Estados que un administrador puede asignar manualmente
MANUAL_STATUSES = frozenset(
    {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED, ReservationStatus.COMPLETED}
)

# Estados que disparan el email de cambio de estado al huésped
STATUS_EMAIL_STATUSES = frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED})

METADATA_RESERVATION_ID = "reservation_id"

PAYMENT_STATUS_FROM_GATEWAY = {
    "paid": PaymentStatus.PAID,
    "unpaid": PaymentStatus.PENDING,
    "no_payment_required": PaymentStatus.PENDING,
}
