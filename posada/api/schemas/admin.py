from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from posada.application.interfaces.reservation_store import ReservationWithGuest
from posada.domain.entities import Reservation


class ReservationResponse(BaseModel):
    id: str
    room_id: str
    guest_id: str
    check_in: date
    check_out: date
    nights: int
    occupancy: int
    total_amount: Decimal
    status: str
    payment_status: str
    checkout_session_id: str | None = None
    payment_intent_id: str | None = None
    payment_method: str | None = None
    payment_approved_at: datetime | None = None
    notes: str | None = None
    lock_version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, reservation: Reservation) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            room_id=reservation.room_id,
            guest_id=reservation.guest_id,
            check_in=reservation.check_in,
            check_out=reservation.check_out,
            nights=reservation.nights,
            occupancy=reservation.occupancy,
            total_amount=reservation.total_amount,
            status=reservation.status.value,
            payment_status=reservation.payment_status.value,
            checkout_session_id=reservation.checkout_session_id,
            payment_intent_id=reservation.payment_intent_id,
            payment_method=reservation.payment_method,
            payment_approved_at=reservation.payment_approved_at,
            notes=reservation.notes,
            lock_version=reservation.lock_version,
            created_at=reservation.created_at,
            updated_at=reservation.updated_at,
        )


class AdminReservationItem(ReservationResponse):
    guest_name: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None

    @classmethod
    def from_row(cls, row: ReservationWithGuest) -> "AdminReservationItem":
        base = ReservationResponse.from_entity(row.reservation).model_dump()
        guest = row.guest
        return cls(
            **base,
            guest_name=guest.name if guest else None,
            guest_email=guest.email if guest else None,
            guest_phone=guest.phone if guest else None,
        )


class SetStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str
    expected_lock_version: int | None = None


class DeleteReservationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: str
