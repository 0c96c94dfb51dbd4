from datetime import date

from posada.application.interfaces.reservation_store import ReservationStore
from posada.domain.constants import BLOCKING_STATUSES
from posada.domain.errors import ValidationError
from posada.domain.value_objects import StayWindow


class GetOccupiedDatesUseCase:
    def __init__(self, store: ReservationStore) -> None:
        self._store = store

    async def execute(self, room_id: str) -> list[date]:
        """Noches ocupadas por reservas bloqueantes; el día de check-out queda libre."""
        room = await self._store.get_room(room_id)
        if room is None:
            raise ValidationError("room_id", f"habitación inexistente: {room_id}")

        rows = await self._store.list_reservations(room_id=room_id, statuses=BLOCKING_STATUSES)
        occupied: set[date] = set()
        for row in rows:
            occupied.update(row.reservation.stay_window.dates())
        return sorted(occupied)


class GetAvailableRoomsUseCase:
    def __init__(self, store: ReservationStore) -> None:
        self._store = store

    async def execute(self, check_in: date, check_out: date) -> list[str]:
        window = StayWindow(start=check_in, end=check_out)
        available = []
        for room in await self._store.list_rooms(active_only=True):
            overlapping = await self._store.find_overlapping(
                room.id, window.start, window.end, BLOCKING_STATUSES
            )
            if not overlapping:
                available.append(room.id)
        return available
