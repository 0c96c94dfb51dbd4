from dataclasses import dataclass

from posada.application.interfaces.email_sender import BookingEmail, EmailSender


@dataclass
class SentEmail:
    kind: str
    to: str
    reservation_id: str
    status: str | None = None


class RecordingEmailSender(EmailSender):
    """Guarda los emails en memoria; útil para verificar efectos en tests."""

    def __init__(self) -> None:
        self.sent: list[SentEmail] = []
        self.fail = False

    def _record(self, email: SentEmail) -> None:
        if self.fail:
            raise RuntimeError("email provider unavailable")
        self.sent.append(email)

    async def send_booking_confirmation(self, email: BookingEmail) -> None:
        self._record(SentEmail("booking_confirmation", email.guest_email, email.reservation_id))

    async def send_admin_payment_approved(self, email: BookingEmail, recipient: str) -> None:
        self._record(SentEmail("admin_payment_approved", recipient, email.reservation_id))

    async def send_status_change(self, email: BookingEmail, status: str) -> None:
        self._record(SentEmail("status_change", email.guest_email, email.reservation_id, status))

    def of_kind(self, kind: str) -> list[SentEmail]:
        return [email for email in self.sent if email.kind == kind]
