from datetime import date
from decimal import Decimal

import pytest

from posada.application.use_cases.delete_reservation import DeleteReservationUseCase
from posada.domain.entities import GuestInput, PaymentStatus, ReservationStatus
from posada.domain.errors import (
    AdminAuthorizationError,
    InvalidDateRangeError,
    OptimisticLockError,
    ReservationNotFoundError,
    UnavailableError,
    ValidationError,
)
from posada.infrastructure.auth.admin_session import SharedSecretAdminGuard


async def _confirm(use_cases, store, reservation_id, admin_token):
    reservation = store.reservations[reservation_id]
    return await use_cases["set_status"].execute(
        admin_token=admin_token,
        reservation_id=reservation_id,
        new_status="confirmed",
        expected_lock_version=reservation.lock_version,
    )


# ============================================================================
# CAMBIO MANUAL DE ESTADO
# ============================================================================

@pytest.mark.asyncio
async def test_admin_confirms_reservation_and_guest_is_notified(book, use_cases, store, email_sender, admin_token):
    booking = await book()

    updated = await _confirm(use_cases, store, booking.reservation_id, admin_token)

    assert updated.status == ReservationStatus.CONFIRMED
    assert updated.payment_status == PaymentStatus.PENDING
    [email] = email_sender.of_kind("status_change")
    assert email.status == "confirmed"
    assert email.to == "maria@example.com"


@pytest.mark.asyncio
async def test_admin_cancel_clears_payment_approval(book, use_cases, store, stripe_event, signer, admin_token):
    booking = await book()
    body = stripe_event("checkout.session.completed", booking.reservation_id)
    await use_cases["handle_webhook"].execute(raw_body=body, signature=signer(body))

    updated = await use_cases["set_status"].execute(
        admin_token=admin_token, reservation_id=booking.reservation_id, new_status="cancelled"
    )

    assert updated.status == ReservationStatus.CANCELLED
    assert updated.payment_status == PaymentStatus.CANCELLED
    assert updated.payment_approved_at is None


@pytest.mark.asyncio
async def test_completed_status_sends_no_email(book, use_cases, email_sender, admin_token):
    booking = await book()

    await use_cases["set_status"].execute(
        admin_token=admin_token, reservation_id=booking.reservation_id, new_status="completed"
    )

    assert email_sender.of_kind("status_change") == []


@pytest.mark.asyncio
async def test_stale_lock_version_is_a_conflict(book, use_cases, store, stripe_event, signer, admin_token):
    booking = await book()
    seen_version = store.reservations[booking.reservation_id].lock_version

    # La conciliación escribe después de que el administrador leyó la reserva
    body = stripe_event("checkout.session.expired", booking.reservation_id, payment_status="unpaid")
    await use_cases["handle_webhook"].execute(raw_body=body, signature=signer(body))

    with pytest.raises(OptimisticLockError):
        await use_cases["set_status"].execute(
            admin_token=admin_token,
            reservation_id=booking.reservation_id,
            new_status="confirmed",
            expected_lock_version=seen_version,
        )
    assert store.reservations[booking.reservation_id].status == ReservationStatus.CANCELLED


@pytest.mark.asyncio
@pytest.mark.parametrize("new_status", ["pending", "archived", ""])
async def test_status_outside_manual_set_is_rejected(book, use_cases, new_status, admin_token):
    booking = await book()

    with pytest.raises(ValidationError) as exc_info:
        await use_cases["set_status"].execute(
            admin_token=admin_token, reservation_id=booking.reservation_id, new_status=new_status
        )
    assert exc_info.value.code == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_set_status_unknown_reservation(use_cases, admin_token):
    with pytest.raises(ReservationNotFoundError):
        await use_cases["set_status"].execute(
            admin_token=admin_token, reservation_id="missing", new_status="confirmed"
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "wrong-token"])
async def test_set_status_requires_admin_session(book, use_cases, store, token):
    booking = await book()
    before = store.reservations[booking.reservation_id]

    with pytest.raises(AdminAuthorizationError) as exc_info:
        await use_cases["set_status"].execute(
            admin_token=token, reservation_id=booking.reservation_id, new_status="confirmed"
        )
    assert not exc_info.value.forbidden
    assert store.reservations[booking.reservation_id] == before


# ============================================================================
# RESERVA MANUAL
# ============================================================================

@pytest.mark.asyncio
async def test_manual_booking_is_pending_without_checkout(
    use_cases, store, guest, email_sender, payment_gateway, admin_token
):
    reservation = await use_cases["create_manual_booking"].execute(
        admin_token=admin_token,
        room_id="S",
        check_in=date(2024, 7, 1),
        check_out=date(2024, 7, 4),
        guest=guest,
        occupancy=3,
        total_amount=Decimal("900.00"),
        notes="Reserva por teléfono",
    )

    stored = store.reservations[reservation.id]
    assert stored.status == ReservationStatus.PENDING
    assert stored.payment_status == PaymentStatus.NOT_STARTED
    assert stored.checkout_session_id is None
    assert stored.notes == "Reserva por teléfono"
    assert payment_gateway.requests == []
    assert [email.kind for email in email_sender.sent] == ["booking_confirmation"]


@pytest.mark.asyncio
async def test_manual_booking_respects_availability(book, use_cases, guest, admin_token):
    await book(room_id="S", check_in=date(2024, 7, 1), check_out=date(2024, 7, 4))

    with pytest.raises(UnavailableError):
        await use_cases["create_manual_booking"].execute(
            admin_token=admin_token,
            room_id="S",
            check_in=date(2024, 7, 3),
            check_out=date(2024, 7, 5),
            guest=guest,
            occupancy=1,
            total_amount=Decimal("300.00"),
        )


@pytest.mark.asyncio
async def test_manual_booking_requires_admin_session(use_cases, store, guest):
    with pytest.raises(AdminAuthorizationError):
        await use_cases["create_manual_booking"].execute(
            admin_token=None,
            room_id="S",
            check_in=date(2024, 7, 1),
            check_out=date(2024, 7, 2),
            guest=guest,
            occupancy=1,
            total_amount=Decimal("300.00"),
        )
    assert store.reservations == {}
    assert store.guests == {}


# ============================================================================
# ELIMINACIÓN
# ============================================================================

@pytest.mark.asyncio
async def test_delete_reservation_with_credential(book, use_cases, store, admin_token, delete_password):
    booking = await book()

    await use_cases["delete_reservation"].execute(
        admin_token=admin_token, reservation_id=booking.reservation_id, password=delete_password
    )

    assert booking.reservation_id not in store.reservations


@pytest.mark.asyncio
@pytest.mark.parametrize("password", [None, "", "nope"])
async def test_delete_with_wrong_password_is_forbidden(book, use_cases, store, password, admin_token):
    booking = await book()

    with pytest.raises(AdminAuthorizationError) as exc_info:
        await use_cases["delete_reservation"].execute(
            admin_token=admin_token, reservation_id=booking.reservation_id, password=password
        )
    assert exc_info.value.forbidden
    assert booking.reservation_id in store.reservations


@pytest.mark.asyncio
async def test_delete_without_configured_credential_is_forbidden(book, store, admin_token):
    use_case = DeleteReservationUseCase(
        store=store,
        admin_guard=SharedSecretAdminGuard(session_secret=admin_token, delete_credential=None),
    )
    booking = await book()

    with pytest.raises(AdminAuthorizationError) as exc_info:
        await use_case.execute(admin_token=admin_token, reservation_id=booking.reservation_id, password="")
    assert exc_info.value.forbidden


@pytest.mark.asyncio
async def test_delete_unknown_reservation(use_cases, admin_token, delete_password):
    with pytest.raises(ReservationNotFoundError):
        await use_cases["delete_reservation"].execute(
            admin_token=admin_token, reservation_id="missing", password=delete_password
        )


# ============================================================================
# LISTADO
# ============================================================================

@pytest.mark.asyncio
async def test_list_is_newest_first_with_guest(book, use_cases, clock, admin_token):
    first = await book(check_in=date(2024, 6, 10), check_out=date(2024, 6, 11))
    clock.advance(minutes=10)
    second = await book(room_id="S")

    rows = await use_cases["list_reservations"].execute(admin_token=admin_token)

    assert [row.reservation.id for row in rows] == [second.reservation_id, first.reservation_id]
    assert rows[0].guest.email == "maria@example.com"


@pytest.mark.asyncio
async def test_list_filters_by_status_and_guest_name(book, use_cases, store, admin_token):
    maria = await book()
    joao = await book(
        room_id="S", guest_input=GuestInput(name="João Pereira", email="joao@example.com")
    )
    await _confirm(use_cases, store, joao.reservation_id, admin_token)

    confirmed = await use_cases["list_reservations"].execute(admin_token=admin_token, status="confirmed")
    by_name = await use_cases["list_reservations"].execute(admin_token=admin_token, search="  maria ")

    assert [row.reservation.id for row in confirmed] == [joao.reservation_id]
    assert [row.reservation.id for row in by_name] == [maria.reservation_id]


@pytest.mark.asyncio
async def test_list_rejects_unknown_status(use_cases, admin_token):
    with pytest.raises(ValidationError):
        await use_cases["list_reservations"].execute(admin_token=admin_token, status="archived")


# ============================================================================
# DISPONIBILIDAD
# ============================================================================

@pytest.mark.asyncio
async def test_occupied_dates_exclude_checkout_day(book, use_cases):
    await book(check_in=date(2024, 6, 10), check_out=date(2024, 6, 12))

    dates = await use_cases["occupied_dates"].execute("R")

    assert dates == [date(2024, 6, 10), date(2024, 6, 11)]


@pytest.mark.asyncio
async def test_occupied_dates_ignore_cancelled(book, use_cases, admin_token):
    booking = await book()
    await use_cases["set_status"].execute(
        admin_token=admin_token, reservation_id=booking.reservation_id, new_status="cancelled"
    )

    assert await use_cases["occupied_dates"].execute("R") == []


@pytest.mark.asyncio
async def test_occupied_dates_unknown_room(use_cases):
    with pytest.raises(ValidationError):
        await use_cases["occupied_dates"].execute("nope")


@pytest.mark.asyncio
async def test_available_rooms_excludes_booked_and_inactive(book, use_cases):
    await book(room_id="R", check_in=date(2024, 6, 10), check_out=date(2024, 6, 12))

    during = await use_cases["available_rooms"].execute(date(2024, 6, 11), date(2024, 6, 13))
    after = await use_cases["available_rooms"].execute(date(2024, 6, 12), date(2024, 6, 14))

    assert during == ["S"]
    assert after == ["R", "S"]


@pytest.mark.asyncio
async def test_available_rooms_rejects_inverted_range(use_cases):
    with pytest.raises(InvalidDateRangeError):
        await use_cases["available_rooms"].execute(date(2024, 6, 12), date(2024, 6, 10))
