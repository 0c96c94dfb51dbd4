from functools import lru_cache

from fastapi import Cookie, Depends, Header

from posada.api.deps import AsyncSessionLocal
from posada.application.interfaces.clock import SystemClock
from posada.application.interfaces.email_sender import EmailSender
from posada.application.interfaces.uuid_generator import RealUUIDGenerator
from posada.application.use_cases.create_booking import CreateBookingUseCase
from posada.application.use_cases.create_manual_booking import CreateManualBookingUseCase
from posada.application.use_cases.delete_reservation import DeleteReservationUseCase
from posada.application.use_cases.get_availability import (
    GetAvailableRoomsUseCase,
    GetOccupiedDatesUseCase,
)
from posada.application.use_cases.handle_stripe_webhook import HandleStripeWebhookUseCase
from posada.application.use_cases.list_reservations import ListReservationsUseCase
from posada.application.use_cases.set_reservation_status import SetReservationStatusUseCase
from posada.config import Settings, get_settings
from posada.domain.entities import Room
from posada.infrastructure.auth.admin_session import SharedSecretAdminGuard
from posada.infrastructure.db.repositories.reservation_store_sql import ReservationStoreSQL
from posada.infrastructure.email.resend_email_sender import LoggingEmailSender, ResendEmailSender
from posada.infrastructure.gateways.in_memory import InMemoryReservationStore, StubPaymentGateway
from posada.infrastructure.gateways.stripe_checkout_gateway import StripeCheckoutGateway

# Habitaciones de demostración para el modo in-memory
DEMO_ROOMS = (
    Room(id="suite-rio", name="Suíte Rio São Francisco", display_order=1),
    Room(id="chale-caatinga", name="Chalé Caatinga", display_order=2),
    Room(id="quarto-familia", name="Quarto Família", display_order=3),
)


def _email_sender(settings: Settings) -> EmailSender:
    if settings.resend_api_key:
        return ResendEmailSender(api_key=settings.resend_api_key, from_email=settings.email_from)
    return LoggingEmailSender()


@lru_cache(maxsize=1)
def _in_memory_bundle():
    settings = get_settings()
    clock = SystemClock()
    uuid_generator = RealUUIDGenerator()
    store = InMemoryReservationStore(uuid_generator=uuid_generator)
    for room in DEMO_ROOMS:
        store.add_room(room)
    return {
        "store": store,
        "payment_gateway": StubPaymentGateway(
            webhook_secret=settings.stripe_webhook_secret,
            tolerance_seconds=settings.stripe_webhook_tolerance_seconds,
        ),
        "email_sender": _email_sender(settings),
        "clock": clock,
        "uuid_generator": uuid_generator,
    }


def _sql_bundle(settings: Settings):
    clock = SystemClock()
    uuid_generator = RealUUIDGenerator()
    return {
        "store": ReservationStoreSQL(AsyncSessionLocal, uuid_generator=uuid_generator, clock=clock),
        "payment_gateway": StripeCheckoutGateway(settings=settings, clock=clock),
        "email_sender": _email_sender(settings),
        "clock": clock,
        "uuid_generator": uuid_generator,
    }


def get_use_cases(settings: Settings = Depends(get_settings)):
    bundle = _in_memory_bundle() if settings.use_in_memory else _sql_bundle(settings)
    store = bundle["store"]
    admin_guard = SharedSecretAdminGuard(
        session_secret=settings.admin_session_secret,
        delete_credential=settings.delete_credential,
    )

    return {
        "create_booking": CreateBookingUseCase(
            store=store,
            payment_gateway=bundle["payment_gateway"],
            uuid_generator=bundle["uuid_generator"],
            clock=bundle["clock"],
            site_url=settings.site_url,
        ),
        "handle_webhook": HandleStripeWebhookUseCase(
            store=store,
            payment_gateway=bundle["payment_gateway"],
            email_sender=bundle["email_sender"],
            clock=bundle["clock"],
            admin_notification_email=settings.admin_notification_email,
        ),
        "set_status": SetReservationStatusUseCase(
            store=store,
            admin_guard=admin_guard,
            email_sender=bundle["email_sender"],
            clock=bundle["clock"],
        ),
        "create_manual_booking": CreateManualBookingUseCase(
            store=store,
            admin_guard=admin_guard,
            email_sender=bundle["email_sender"],
            uuid_generator=bundle["uuid_generator"],
            clock=bundle["clock"],
        ),
        "delete_reservation": DeleteReservationUseCase(store=store, admin_guard=admin_guard),
        "list_reservations": ListReservationsUseCase(store=store, admin_guard=admin_guard),
        "occupied_dates": GetOccupiedDatesUseCase(store=store),
        "available_rooms": GetAvailableRoomsUseCase(store=store),
    }


def get_admin_token(
    x_admin_session: str | None = Header(default=None, alias="X-Admin-Session"),
    admin_session: str | None = Cookie(default=None),
) -> str | None:
    return x_admin_session or admin_session
