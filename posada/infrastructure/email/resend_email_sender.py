"""
Envío de emails transaccionales con Resend.

Los cuerpos HTML son mínimos; el proveedor se llama en un hilo porque el SDK
de resend es síncrono. Sin RESEND_API_KEY se usa LoggingEmailSender, que solo
deja constancia en el log.
"""

import asyncio
import logging
import re
from datetime import date
from decimal import Decimal
from html import escape

import resend

from posada.application.interfaces.email_sender import BookingEmail, EmailSender

logger = logging.getLogger(__name__)

BRAND_NAME = "Posada"

STATUS_TITLES = {
    "confirmed": "Reserva Confirmada",
    "cancelled": "Reserva Cancelada",
}


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_brl(amount: Decimal) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    formatted = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {formatted}"


def _details_table(email: BookingEmail) -> str:
    rows = [
        ("Reserva", email.reservation_id),
        ("Quarto", email.room_name),
        ("Check-in", format_date(email.check_in)),
        ("Check-out", format_date(email.check_out)),
        ("Noites", str(email.nights)),
        ("Hóspedes", str(email.occupancy)),
        ("Total", format_brl(email.total_amount)),
    ]
    cells = "".join(
        f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    return f"<table>{cells}</table>"


def render_booking_confirmation(email: BookingEmail) -> tuple[str, str]:
    subject = f"Reserva {email.reservation_id} - {BRAND_NAME}"
    html = (
        f"<h1>Olá, {escape(email.guest_name)}!</h1>"
        "<p>Recebemos a sua reserva. Seguem os detalhes:</p>"
        f"{_details_table(email)}"
        f"<p>{BRAND_NAME}</p>"
    )
    return subject, html


def render_admin_payment_approved(email: BookingEmail) -> tuple[str, str]:
    subject = f"Pagamento aprovado - Reserva {email.reservation_id}"
    html = (
        "<h1>Pagamento aprovado</h1>"
        f"<p>Hóspede: {escape(email.guest_name)} &lt;{escape(email.guest_email)}&gt;"
        f"{' | ' + escape(email.guest_phone) if email.guest_phone else ''}</p>"
        f"{_details_table(email)}"
    )
    return subject, html


def render_status_change(email: BookingEmail, status: str) -> tuple[str, str]:
    title = STATUS_TITLES.get(status, "Atualização da Reserva")
    subject = f"{title} - {BRAND_NAME}"
    if status == "confirmed":
        message = "A sua reserva foi confirmada. Esperamos por você!"
    else:
        message = "A sua reserva foi cancelada. Em caso de dúvidas, entre em contato conosco."
    html = (
        f"<h1>{escape(title)}</h1>"
        f"<p>Olá, {escape(email.guest_name)}. {message}</p>"
        f"{_details_table(email)}"
    )
    return subject, html


def html_to_text(html_content: str) -> str:
    text = re.sub(r"<[^>]+>", " ", html_content)
    return re.sub(r"\s+", " ", text).strip()


class ResendEmailSender(EmailSender):
    def __init__(self, api_key: str, from_email: str) -> None:
        resend.api_key = api_key
        self.from_email = from_email

    async def _send(self, to_email: str, subject: str, html_content: str) -> None:
        email_data = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": html_to_text(html_content),
        }
        response = await asyncio.to_thread(resend.Emails.send, email_data)
        logger.info(
            "Email sent",
            extra={"to_email": to_email, "subject": subject, "email_id": (response or {}).get("id")},
        )

    async def send_booking_confirmation(self, email: BookingEmail) -> None:
        subject, html = render_booking_confirmation(email)
        await self._send(email.guest_email, subject, html)

    async def send_admin_payment_approved(self, email: BookingEmail, recipient: str) -> None:
        subject, html = render_admin_payment_approved(email)
        await self._send(recipient, subject, html)

    async def send_status_change(self, email: BookingEmail, status: str) -> None:
        subject, html = render_status_change(email, status)
        await self._send(email.guest_email, subject, html)


class LoggingEmailSender(EmailSender):
    """Sustituto cuando no hay proveedor configurado."""

    async def send_booking_confirmation(self, email: BookingEmail) -> None:
        subject, _ = render_booking_confirmation(email)
        self._log(email.guest_email, subject, email.reservation_id)

    async def send_admin_payment_approved(self, email: BookingEmail, recipient: str) -> None:
        subject, _ = render_admin_payment_approved(email)
        self._log(recipient, subject, email.reservation_id)

    async def send_status_change(self, email: BookingEmail, status: str) -> None:
        subject, _ = render_status_change(email, status)
        self._log(email.guest_email, subject, email.reservation_id)

    def _log(self, to_email: str, subject: str, reservation_id: str) -> None:
        logger.warning(
            "RESEND_API_KEY not configured, email not sent",
            extra={"to_email": to_email, "subject": subject, "reservation_id": reservation_id},
        )
