import logging
from typing import Awaitable

from posada.application.interfaces.email_sender import BookingEmail
from posada.application.interfaces.reservation_store import ReservationStore
from posada.domain.entities import Guest, Reservation, Room

logger = logging.getLogger(__name__)


def build_booking_email(reservation: Reservation, guest: Guest, room: Room | None) -> BookingEmail:
    return BookingEmail(
        reservation_id=reservation.id,
        guest_name=guest.name,
        guest_email=guest.email,
        guest_phone=guest.phone,
        room_name=room.name if room else reservation.room_id,
        check_in=reservation.check_in,
        check_out=reservation.check_out,
        occupancy=reservation.occupancy,
        total_amount=reservation.total_amount,
    )


async def load_booking_email(store: ReservationStore, reservation: Reservation) -> BookingEmail | None:
    guest = await store.get_guest(reservation.guest_id)
    if guest is None:
        logger.warning(
            "Guest not found for reservation, email skipped",
            extra={"reservation_id": reservation.id, "guest_id": reservation.guest_id},
        )
        return None
    room = await store.get_room(reservation.room_id)
    return build_booking_email(reservation, guest, room)


async def dispatch_email(kind: str, send: Awaitable[None], reservation_id: str) -> bool:
    """Espera el envío; un fallo se registra y nunca se propaga al estado de la reserva."""
    try:
        await send
    except Exception:
        logger.exception(
            "Email dispatch failed",
            extra={"email_kind": kind, "reservation_id": reservation_id},
        )
        return False
    return True
