import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from email_validator import EmailNotValidError, validate_email

from posada.application.interfaces.clock import Clock
from posada.application.interfaces.payment_gateway import CheckoutRequest, PaymentGateway
from posada.application.interfaces.reservation_store import ReservationStore
from posada.application.interfaces.uuid_generator import UUIDGenerator
from posada.domain.constants import (
    BLOCKING_STATUSES,
    METADATA_RESERVATION_ID,
    PAYMENT_STATUS_FROM_GATEWAY,
)
from posada.domain.entities import (
    GuestInput,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Room,
)
from posada.domain.errors import (
    GatewayError,
    PersistenceError,
    UnavailableError,
    ValidationError,
)
from posada.domain.value_objects import Money, StayWindow


@dataclass
class BookingResult:
    reservation_id: str
    checkout_url: str


def validate_guest(guest: GuestInput) -> GuestInput:
    """Valida nombre y email del huésped y retorna una copia normalizada."""
    name = (guest.name or "").strip()
    if not name:
        raise ValidationError("guest.name", "el nombre es obligatorio")
    email = guest.normalized_email() if guest.email else ""
    if not email:
        raise ValidationError("guest.email", "el email es obligatorio")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("guest.email", str(exc)) from exc
    return GuestInput(
        name=name,
        email=email,
        phone=guest.phone,
        document=guest.document,
        city=guest.city,
    )


def validate_stay(check_in: date, check_out: date, occupancy: int, total_amount: Decimal) -> StayWindow:
    window = StayWindow(start=check_in, end=check_out)
    if occupancy < 1:
        raise ValidationError("occupancy", "debe haber al menos un huésped")
    Money(amount=total_amount).to_minor_units()
    return window


async def get_bookable_room(store: ReservationStore, room_id: str) -> Room:
    room = await store.get_room(room_id)
    if room is None or not room.active:
        raise ValidationError("room_id", f"habitación inexistente o inactiva: {room_id}")
    return room


async def assert_available(store: ReservationStore, room_id: str, window: StayWindow) -> None:
    overlapping = await store.find_overlapping(room_id, window.start, window.end, BLOCKING_STATUSES)
    if overlapping:
        raise UnavailableError(room_id, window.start.isoformat(), window.end.isoformat())


class CreateBookingUseCase:
    """
    Orquesta la creación de una reserva con pago en Stripe Checkout.

    El registro local y la sesión remota no pueden confirmarse de forma
    atómica: si algo falla después de insertar la reserva, se aplica una
    transición compensatoria (cancelled/failed) mientras siga en pending.
    """

    def __init__(
        self,
        store: ReservationStore,
        payment_gateway: PaymentGateway,
        uuid_generator: UUIDGenerator,
        clock: Clock,
        site_url: str,
    ) -> None:
        self._store = store
        self._payment_gateway = payment_gateway
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._site_url = site_url.rstrip("/")
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        guest: GuestInput,
        occupancy: int,
        total_amount: Decimal,
        notes: str | None = None,
    ) -> BookingResult:
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
                payment_status=PaymentStatus.PENDING,
                notes=notes,
                created_at=now,
                updated_at=now,
            )
        )
        self._logger.info(
            "Reservation created, opening checkout",
            extra={"reservation_id": reservation.id, "room_id": room.id},
        )

        try:
            checkout_url = await self._open_checkout(reservation, room, guest_record.name, guest_record.email)
        except Exception as exc:
            self._logger.error(
                "Checkout failed, compensating reservation",
                extra={"reservation_id": reservation.id, "error": str(exc)},
            )
            await self._compensate(reservation.id)
            raise

        return BookingResult(reservation_id=reservation.id, checkout_url=checkout_url)

    async def _open_checkout(
        self, reservation: Reservation, room: Room, guest_name: str, guest_email: str
    ) -> str:
        confirmation_url = f"{self._site_url}/reservas/confirmacao?id={reservation.id}"
        session = await self._payment_gateway.create_checkout(
            CheckoutRequest(
                reservation_id=reservation.id,
                room_name=room.name,
                guest_name=guest_name,
                guest_email=guest_email,
                amount=reservation.total_amount,
                success_url=f"{confirmation_url}&session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{confirmation_url}&payment=cancelled",
                metadata={
                    METADATA_RESERVATION_ID: reservation.id,
                    "check_in": reservation.check_in.isoformat(),
                    "check_out": reservation.check_out.isoformat(),
                },
            )
        )
        if not session.url:
            raise GatewayError("Stripe no retornó la URL de checkout")

        changes = {
            "checkout_session_id": session.id,
            "payment_method": session.payment_method_types[0] if session.payment_method_types else None,
            "updated_at": self._clock.now(),
        }
        if session.payment_intent_id:
            changes["payment_intent_id"] = session.payment_intent_id
        if PAYMENT_STATUS_FROM_GATEWAY.get(session.payment_status or "") == PaymentStatus.PAID:
            changes["payment_status"] = PaymentStatus.PAID
            changes["payment_approved_at"] = self._clock.now()

        updated = await self._store.update_reservation(reservation.id, changes)
        if updated is None:
            raise PersistenceError(f"No se pudo vincular la sesión {session.id} a la reserva {reservation.id}")
        return session.url

    async def _compensate(self, reservation_id: str) -> None:
        try:
            compensated = await self._store.update_reservation(
                reservation_id,
                {
                    "status": ReservationStatus.CANCELLED,
                    "payment_status": PaymentStatus.FAILED,
                    "updated_at": self._clock.now(),
                },
                expected_status=ReservationStatus.PENDING,
            )
        except Exception:
            self._logger.exception(
                "Compensation failed", extra={"reservation_id": reservation_id}
            )
            return
        if compensated is None:
            self._logger.warning(
                "Compensation skipped, reservation no longer pending",
                extra={"reservation_id": reservation_id},
            )
