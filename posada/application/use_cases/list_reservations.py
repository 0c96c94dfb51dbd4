from datetime import datetime, timezone

from posada.application.interfaces.admin_guard import AdminGuard
from posada.application.interfaces.reservation_store import (
    ReservationStore,
    ReservationWithGuest,
)
from posada.domain.entities import ReservationStatus
from posada.domain.errors import ValidationError

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class ListReservationsUseCase:
    def __init__(self, store: ReservationStore, admin_guard: AdminGuard) -> None:
        self._store = store
        self._admin_guard = admin_guard

    async def execute(
        self,
        admin_token: str | None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[ReservationWithGuest]:
        """Lista reservas de la más reciente a la más antigua."""
        self._admin_guard.assert_admin_session(admin_token)

        status_filter = None
        if status:
            try:
                status_filter = ReservationStatus(status)
            except ValueError as exc:
                raise ValidationError("status", f"estado desconocido: {status}") from exc

        rows = await self._store.list_reservations(
            status=status_filter,
            guest_search=search.strip() if search and search.strip() else None,
        )
        return sorted(rows, key=_created_at, reverse=True)


def _created_at(row: ReservationWithGuest) -> datetime:
    created = row.reservation.created_at
    if created is None:
        return _OLDEST
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created
