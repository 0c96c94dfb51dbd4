import logging
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError

from posada.application.interfaces.clock import Clock
from posada.application.interfaces.email_sender import EmailSender
from posada.application.interfaces.payment_gateway import PaymentGateway
from posada.application.interfaces.reservation_store import ReservationStore
from posada.application.schemas import CheckoutSessionObject, StripeEvent
from posada.application.use_cases.notifications import dispatch_email, load_booking_email
from posada.domain.entities import Reservation
from posada.domain.errors import MalformedPayloadError, PersistenceError
from posada.domain.payment_transitions import (
    PaymentOperation,
    TransitionPlan,
    classify_event,
    plan_transition,
)

MAX_CAS_ATTEMPTS = 3


@dataclass
class ReconciliationOutcome:
    event_id: str
    event_type: str
    reservation_id: str | None = None
    operation: PaymentOperation | None = None
    applied: bool = False
    skipped: bool = False


class HandleStripeWebhookUseCase:
    def __init__(
        self,
        store: ReservationStore,
        payment_gateway: PaymentGateway,
        email_sender: EmailSender,
        clock: Clock,
        admin_notification_email: str | None = None,
    ) -> None:
        self._store = store
        self._payment_gateway = payment_gateway
        self._email_sender = email_sender
        self._clock = clock
        self._admin_notification_email = admin_notification_email
        self._logger = logging.getLogger(__name__)

    async def execute(self, raw_body: bytes, signature: str | None) -> ReconciliationOutcome:
        event = self._payment_gateway.verify_notification(raw_body, signature)
        return await self.reconcile(event)

    async def reconcile(self, event: StripeEvent) -> ReconciliationOutcome:
        outcome = ReconciliationOutcome(event_id=event.id, event_type=event.type)
        obj = event.data.object
        category = classify_event(event.type, obj.get("payment_status"))
        if category is None:
            self._logger.info(
                "Stripe webhook ignored: unhandled event type",
                extra={"stripe_event_id": event.id, "event_type": event.type},
            )
            return outcome

        try:
            session = CheckoutSessionObject.model_validate(obj)
        except PydanticValidationError as exc:
            raise MalformedPayloadError(f"Objeto checkout.session inválido: {exc.error_count()} errores") from exc

        reservation = await self._resolve_reservation(session)
        if reservation is None:
            self._logger.warning(
                "Stripe webhook ignored: reservation not found",
                extra={"stripe_event_id": event.id, "checkout_session_id": session.id},
            )
            return outcome
        outcome.reservation_id = reservation.id

        linkage = {
            "checkout_session_id": session.id,
            "payment_intent_id": session.payment_intent_id,
            "payment_method": session.payment_method,
        }

        plan: TransitionPlan | None = None
        for _ in range(MAX_CAS_ATTEMPTS):
            plan = plan_transition(category, reservation, linkage, self._clock.now())
            outcome.operation = plan.operation
            if plan.skipped:
                self._logger.warning(
                    "Stripe webhook transition skipped by guard",
                    extra={
                        "stripe_event_id": event.id,
                        "reservation_id": reservation.id,
                        "operation": plan.operation.value,
                        "payment_status": reservation.payment_status.value,
                        "status": reservation.status.value,
                    },
                )
                outcome.skipped = True
                return outcome
            if not plan.has_changes:
                return outcome

            updated = await self._store.update_reservation(
                reservation.id,
                {**plan.changes, "updated_at": self._clock.now()},
                expected_lock_version=reservation.lock_version,
            )
            if updated is not None:
                reservation = updated
                break

            current = await self._store.get_reservation(reservation.id)
            if current is None:
                return outcome
            reservation = current
        else:
            raise PersistenceError(
                f"No se pudo aplicar {event.type} a la reserva {reservation.id} tras {MAX_CAS_ATTEMPTS} intentos"
            )

        outcome.applied = True
        self._logger.info(
            "Stripe webhook processed",
            extra={
                "stripe_event_id": event.id,
                "reservation_id": reservation.id,
                "operation": plan.operation.value,
                "payment_status": reservation.payment_status.value,
                "status": reservation.status.value,
            },
        )
        if plan.notify_guest:
            await self._notify_payment_approved(reservation)
        return outcome

    async def _resolve_reservation(self, session: CheckoutSessionObject) -> Reservation | None:
        for candidate in (session.metadata_reservation_id, session.client_reference_id):
            if candidate:
                reservation = await self._store.get_reservation(candidate)
                if reservation is not None:
                    return reservation
        return await self._store.get_reservation_by_checkout_session_id(session.id)

    async def _notify_payment_approved(self, reservation: Reservation) -> None:
        email = await load_booking_email(self._store, reservation)
        if email is None:
            return
        await dispatch_email(
            "booking_confirmation",
            self._email_sender.send_booking_confirmation(email),
            reservation.id,
        )
        if self._admin_notification_email:
            await dispatch_email(
                "admin_payment_approved",
                self._email_sender.send_admin_payment_approved(email, self._admin_notification_email),
                reservation.id,
            )
