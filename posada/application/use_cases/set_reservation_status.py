import logging

from posada.application.interfaces.admin_guard import AdminGuard
from posada.application.interfaces.clock import Clock
from posada.application.interfaces.email_sender import EmailSender
from posada.application.interfaces.reservation_store import ReservationStore
from posada.application.use_cases.notifications import dispatch_email, load_booking_email
from posada.domain.constants import MANUAL_STATUSES, STATUS_EMAIL_STATUSES
from posada.domain.entities import PaymentStatus, Reservation, ReservationStatus
from posada.domain.errors import OptimisticLockError, ReservationNotFoundError, ValidationError


class SetReservationStatusUseCase:
    """
    Cambio manual de estado por un administrador.

    No aplica las guardas de no-regresión de la conciliación, pero la
    escritura es compare-and-set sobre lock_version: si un webhook escribió
    entre la lectura y la actualización, el administrador recibe un conflicto.
    """

    def __init__(
        self,
        store: ReservationStore,
        admin_guard: AdminGuard,
        email_sender: EmailSender,
        clock: Clock,
    ) -> None:
        self._store = store
        self._admin_guard = admin_guard
        self._email_sender = email_sender
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        admin_token: str | None,
        reservation_id: str,
        new_status: str,
        expected_lock_version: int | None = None,
    ) -> Reservation:
        self._admin_guard.assert_admin_session(admin_token)

        try:
            status = ReservationStatus(new_status)
        except ValueError:
            status = None
        if status not in MANUAL_STATUSES:
            raise ValidationError(
                "status", f"estado no permitido: {new_status}", code="INVALID_STATUS"
            )

        reservation = await self._store.get_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        version = reservation.lock_version if expected_lock_version is None else expected_lock_version

        changes = {"status": status, "updated_at": self._clock.now()}
        if status == ReservationStatus.CANCELLED:
            changes["payment_status"] = PaymentStatus.CANCELLED
            changes["payment_approved_at"] = None

        updated = await self._store.update_reservation(
            reservation_id, changes, expected_lock_version=version
        )
        if updated is None:
            if await self._store.get_reservation(reservation_id) is None:
                raise ReservationNotFoundError(reservation_id)
            raise OptimisticLockError(reservation_id, version)

        self._logger.info(
            "Reservation status set by admin",
            extra={
                "reservation_id": reservation_id,
                "previous_status": reservation.status.value,
                "status": status.value,
            },
        )

        if status in STATUS_EMAIL_STATUSES:
            email = await load_booking_email(self._store, updated)
            if email is not None:
                await dispatch_email(
                    "status_change",
                    self._email_sender.send_status_change(email, status.value),
                    reservation_id,
                )
        return updated
