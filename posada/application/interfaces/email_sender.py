from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass
class BookingEmail:
    """Datos que necesita cualquier email relacionado con una reservación."""

    reservation_id: str
    guest_name: str
    guest_email: str
    guest_phone: str | None
    room_name: str
    check_in: date
    check_out: date
    occupancy: int
    total_amount: Decimal

    @property
    def nights(self) -> int:
        return max((self.check_out - self.check_in).days, 1)


class EmailSender:
    async def send_booking_confirmation(self, email: BookingEmail) -> None:
        raise NotImplementedError

    async def send_admin_payment_approved(self, email: BookingEmail, recipient: str) -> None:
        raise NotImplementedError

    async def send_status_change(self, email: BookingEmail, status: str) -> None:
        raise NotImplementedError
