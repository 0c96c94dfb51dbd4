import logging

from posada.application.interfaces.admin_guard import AdminGuard
from posada.application.interfaces.reservation_store import ReservationStore
from posada.domain.errors import ReservationNotFoundError


class DeleteReservationUseCase:
    def __init__(self, store: ReservationStore, admin_guard: AdminGuard) -> None:
        self._store = store
        self._admin_guard = admin_guard
        self._logger = logging.getLogger(__name__)

    async def execute(self, admin_token: str | None, reservation_id: str, password: str | None) -> None:
        self._admin_guard.assert_admin_session(admin_token)
        self._admin_guard.assert_delete_credential(password)

        if not await self._store.delete_reservation(reservation_id):
            raise ReservationNotFoundError(reservation_id)
        self._logger.warning("Reservation deleted by admin", extra={"reservation_id": reservation_id})
