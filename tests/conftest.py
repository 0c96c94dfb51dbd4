"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Adaptadores in-memory (store, pasarela simulada, emails grabados)
- Casos de uso cableados con reloj y UUIDs deterministas
- Cliente HTTP de prueba (FastAPI TestClient) con override de get_use_cases
- Firmas de webhook de Stripe válidas
"""

import hashlib
import hmac
import json
import time
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient

from posada.api.dependencies import get_use_cases
from posada.application.interfaces.clock import FakeClock
from posada.application.interfaces.uuid_generator import FakeUUIDGenerator
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
from posada.domain.entities import GuestInput, Room
from posada.infrastructure.auth.admin_session import SharedSecretAdminGuard
from posada.infrastructure.gateways.in_memory import (
    InMemoryReservationStore,
    RecordingEmailSender,
    StubPaymentGateway,
)
from posada.main import app

WEBHOOK_SECRET = "whsec_test_secret"
ADMIN_TOKEN = "admin-session-token"
DELETE_PASSWORD = "delete-me"
ADMIN_EMAIL = "admin@posada.test"
SITE_URL = "https://posada.test"
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# ADAPTADORES
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def uuid_generator() -> FakeUUIDGenerator:
    return FakeUUIDGenerator()


@pytest.fixture
def store() -> InMemoryReservationStore:
    """Store con dos habitaciones activas (R, S) y una inactiva (X)."""
    store = InMemoryReservationStore(uuid_generator=FakeUUIDGenerator())
    store.add_room(Room(id="R", name="Suíte Rio", display_order=1))
    store.add_room(Room(id="S", name="Chalé Sertão", display_order=2))
    store.add_room(Room(id="X", name="Quarto Fechado", active=False, display_order=3))
    return store


@pytest.fixture
def payment_gateway() -> StubPaymentGateway:
    return StubPaymentGateway(webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def admin_guard() -> SharedSecretAdminGuard:
    return SharedSecretAdminGuard(session_secret=ADMIN_TOKEN, delete_credential=DELETE_PASSWORD)


# ============================================================================
# CASOS DE USO
# ============================================================================

@pytest.fixture
def use_cases(store, payment_gateway, email_sender, admin_guard, clock, uuid_generator) -> dict[str, Any]:
    return {
        "create_booking": CreateBookingUseCase(
            store=store,
            payment_gateway=payment_gateway,
            uuid_generator=uuid_generator,
            clock=clock,
            site_url=SITE_URL,
        ),
        "handle_webhook": HandleStripeWebhookUseCase(
            store=store,
            payment_gateway=payment_gateway,
            email_sender=email_sender,
            clock=clock,
            admin_notification_email=ADMIN_EMAIL,
        ),
        "set_status": SetReservationStatusUseCase(
            store=store, admin_guard=admin_guard, email_sender=email_sender, clock=clock
        ),
        "create_manual_booking": CreateManualBookingUseCase(
            store=store,
            admin_guard=admin_guard,
            email_sender=email_sender,
            uuid_generator=uuid_generator,
            clock=clock,
        ),
        "delete_reservation": DeleteReservationUseCase(store=store, admin_guard=admin_guard),
        "list_reservations": ListReservationsUseCase(store=store, admin_guard=admin_guard),
        "occupied_dates": GetOccupiedDatesUseCase(store=store),
        "available_rooms": GetAvailableRoomsUseCase(store=store),
    }


@pytest.fixture
def guest() -> GuestInput:
    return GuestInput(name="Maria Silva", email="Maria@Example.com", phone="+5582999990000")


@pytest.fixture
def book(use_cases, guest) -> Callable:
    """Crea una reserva vía el orquestador con valores por defecto razonables."""

    async def _book(
        room_id: str = "R",
        check_in: date = date(2024, 6, 10),
        check_out: date = date(2024, 6, 12),
        total_amount: Decimal = Decimal("450.00"),
        guest_input: GuestInput | None = None,
    ):
        return await use_cases["create_booking"].execute(
            room_id=room_id,
            check_in=check_in,
            check_out=check_out,
            guest=guest_input or guest,
            occupancy=2,
            total_amount=total_amount,
        )

    return _book


# ============================================================================
# WEBHOOKS
# ============================================================================

def sign(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(
        secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def stripe_event() -> Callable[..., bytes]:
    """Construye el cuerpo JSON de un evento checkout.session.*"""

    def _event(
        event_type: str,
        reservation_id: str | None,
        session_id: str = "cs_test_1",
        payment_status: str = "paid",
        event_id: str = "evt_1",
        client_reference_id: str | None = None,
        payment_intent: str | None = "pi_test_1",
    ) -> bytes:
        metadata = {"reservation_id": reservation_id} if reservation_id else {}
        payload = {
            "id": event_id,
            "type": event_type,
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "payment_status": payment_status,
                    "payment_intent": payment_intent,
                    "payment_method_types": ["pix"],
                    "metadata": metadata,
                    "client_reference_id": client_reference_id,
                }
            },
        }
        return json.dumps(payload).encode()

    return _event


@pytest.fixture
def signer() -> Callable[..., str]:
    return sign


# ============================================================================
# CLIENTE HTTP
# ============================================================================

@pytest.fixture
def client(use_cases) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient con override de get_use_cases.
    Usa los adaptadores in-memory de las fixtures.
    """
    app.dependency_overrides[get_use_cases] = lambda: use_cases

    with TestClient(app) as test_client:
        yield test_client

    # Limpiar overrides
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token() -> str:
    return ADMIN_TOKEN


@pytest.fixture
def delete_password() -> str:
    return DELETE_PASSWORD


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Session": ADMIN_TOKEN}


# ============================================================================
# MARKERS DE PYTEST
# ============================================================================

def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: Tests contra SQLite in-memory con el store SQL"
    )
    config.addinivalue_line(
        "markers",
        "deadlock: Tests de reintentos ante deadlocks"
    )


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================

@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breakers antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    from posada.infrastructure.circuit_breaker import stripe_breaker

    stripe_breaker.close()
    yield
    stripe_breaker.close()
