from fastapi.testclient import TestClient

from posada.application.use_cases.handle_stripe_webhook import HandleStripeWebhookUseCase
from posada.domain.entities import PaymentStatus, ReservationStatus
from posada.infrastructure.gateways.in_memory import StubPaymentGateway


def _create_reservation(client: TestClient) -> str:
    res = client.post(
        "/api/v1/bookings",
        json={
            "room_id": "R",
            "check_in": "2024-06-10",
            "check_out": "2024-06-12",
            "occupancy": 2,
            "total_amount": "450.00",
            "guest": {"name": "Maria Silva", "email": "maria@example.com"},
        },
    )
    assert res.status_code == 201, res.text
    return res.json()["reservation_id"]


def _post_event(client: TestClient, body: bytes, signature: str | None):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    return client.post("/api/v1/webhooks/stripe", content=body, headers=headers)


def test_webhook_confirms_reservation(client: TestClient, store, stripe_event, signer, email_sender):
    reservation_id = _create_reservation(client)
    body = stripe_event("checkout.session.completed", reservation_id, payment_status="paid")

    res = _post_event(client, body, signer(body))

    assert res.status_code == 200
    assert res.json() == {"received": True}
    reservation = store.reservations[reservation_id]
    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.payment_status == PaymentStatus.PAID
    assert len(email_sender.of_kind("booking_confirmation")) == 1


def test_webhook_bad_signature_rejected(client: TestClient, store, stripe_event, signer):
    reservation_id = _create_reservation(client)
    before = store.reservations[reservation_id]
    body = stripe_event("checkout.session.completed", reservation_id)

    res = _post_event(client, body, signer(body, secret="whsec_other"))

    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid webhook signature"
    assert store.reservations[reservation_id] == before


def test_webhook_missing_signature_rejected(client: TestClient, stripe_event):
    res = _post_event(client, stripe_event("checkout.session.completed", "res-1"), None)

    assert res.status_code == 400


def test_webhook_tampered_body_rejected(client: TestClient, store, stripe_event, signer):
    reservation_id = _create_reservation(client)
    signed = stripe_event("checkout.session.completed", reservation_id, payment_status="unpaid")
    tampered = stripe_event("checkout.session.completed", reservation_id, payment_status="paid")

    res = _post_event(client, tampered, signer(signed))

    assert res.status_code == 400
    assert store.reservations[reservation_id].status == ReservationStatus.PENDING


def test_webhook_without_secret_is_unavailable(
    client: TestClient, use_cases, store, email_sender, clock, stripe_event, signer
):
    use_cases["handle_webhook"] = HandleStripeWebhookUseCase(
        store=store,
        payment_gateway=StubPaymentGateway(webhook_secret=None),
        email_sender=email_sender,
        clock=clock,
    )
    body = stripe_event("checkout.session.completed", "res-1")

    res = _post_event(client, body, signer(body))

    assert res.status_code == 503


def test_webhook_unknown_event_acknowledged(client: TestClient, stripe_event, signer):
    body = stripe_event("customer.created", None)

    res = _post_event(client, body, signer(body))

    assert res.status_code == 200


def test_webhook_for_unknown_reservation_acknowledged(client: TestClient, stripe_event, signer):
    body = stripe_event("checkout.session.completed", "missing", session_id="cs_missing")

    res = _post_event(client, body, signer(body))

    assert res.status_code == 200
