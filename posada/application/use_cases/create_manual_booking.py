import logging
from datetime import date
from decimal import Decimal

from posada.application.interfaces.admin_guard import AdminGuard
from posada.application.interfaces.clock import Clock
from posada.application.interfaces.email_sender import EmailSender
from posada.application.interfaces.reservation_store import ReservationStore
from posada.application.interfaces.uuid_generator import UUIDGenerator
from posada.application.use_cases.create_booking import (
    assert_available,
    get_bookable_room,
    validate_guest,
    validate_stay,
)
from posada.application.use_cases.notifications import build_booking_email, dispatch_email
from posada.domain.entities import GuestInput, PaymentStatus, Reservation, ReservationStatus


class CreateManualBookingUseCase:
    """Reserva registrada por un administrador, sin sesión de checkout."""

    def __init__(
        self,
        store: ReservationStore,
        admin_guard: AdminGuard,
        email_sender: EmailSender,
        uuid_generator: UUIDGenerator,
        clock: Clock,
    ) -> None:
        self._store = store
        self._admin_guard = admin_guard
        self._email_sender = email_sender
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        admin_token: str | None,
        room_id: str,
        check_in: date,
        check_out: date,
        guest: GuestInput,
        occupancy: int,
        total_amount: Decimal,
        notes: str | None = None,
    ) -> Reservation:
        self._admin_guard.assert_admin_session(admin_token)

        guest = validate_guest(guest)
        window = validate_stay(check_in, check_out, occupancy, total_amount)
        room = await get_bookable_room(self._store, room_id)

        guest_record = await self._store.upsert_guest_by_email(guest)
        await assert_available(self._store, room.id, window)

        now = self._clock.now()
        reservation = await self._store.insert_reservation(
            Reservation(
                id=self._uuid_generator.generate_uuid(),
                room_id=room.id,
                guest_id=guest_record.id,
                check_in=window.start,
                check_out=window.end,
                occupancy=occupancy,
                total_amount=total_amount,
                status=ReservationStatus.PENDING,
                payment_status=PaymentStatus.NOT_STARTED,
                notes=notes,
                created_at=now,
                updated_at=now,
            )
        )
        self._logger.info(
            "Manual reservation created",
            extra={"reservation_id": reservation.id, "room_id": room.id},
        )

        await dispatch_email(
            "booking_confirmation",
            self._email_sender.send_booking_confirmation(
                build_booking_email(reservation, guest_record, room)
            ),
            reservation.id,
        )
        return reservation
