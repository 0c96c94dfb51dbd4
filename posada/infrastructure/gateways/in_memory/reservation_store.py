from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Iterable

from posada.application.interfaces.reservation_store import (
    ReservationStore,
    ReservationWithGuest,
)
from posada.application.interfaces.uuid_generator import RealUUIDGenerator, UUIDGenerator
from posada.domain.entities import Guest, GuestInput, Reservation, ReservationStatus, Room
from posada.domain.errors import PersistenceError


class InMemoryReservationStore(ReservationStore):
    """Almacenamiento en memoria para desarrollo y tests. Retorna copias."""

    def __init__(self, uuid_generator: UUIDGenerator | None = None) -> None:
        self.rooms: dict[str, Room] = {}
        self.guests: dict[str, Guest] = {}
        self.reservations: dict[str, Reservation] = {}
        self._uuid_generator = uuid_generator or RealUUIDGenerator()

    def add_room(self, room: Room) -> Room:
        self.rooms[room.id] = room
        return room

    async def upsert_guest_by_email(self, guest: GuestInput) -> Guest:
        email = guest.normalized_email()
        now = datetime.now(timezone.utc)
        existing = next((g for g in self.guests.values() if g.email == email), None)
        if existing:
            existing.name = guest.name
            existing.phone = guest.phone
            existing.document = guest.document
            existing.city = guest.city
            existing.updated_at = now
            return replace(existing)
        record = Guest(
            id=self._uuid_generator.generate_uuid(),
            name=guest.name,
            email=email,
            phone=guest.phone,
            document=guest.document,
            city=guest.city,
            created_at=now,
            updated_at=now,
        )
        self.guests[record.id] = record
        return replace(record)

    async def get_guest(self, guest_id: str) -> Guest | None:
        guest = self.guests.get(guest_id)
        return replace(guest) if guest else None

    async def get_room(self, room_id: str) -> Room | None:
        return self.rooms.get(room_id)

    async def list_rooms(self, active_only: bool = True) -> list[Room]:
        rooms = [room for room in self.rooms.values() if room.active or not active_only]
        return sorted(rooms, key=lambda room: (room.display_order, room.name))

    async def find_overlapping(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        statuses: Iterable[ReservationStatus],
    ) -> list[Reservation]:
        wanted = set(statuses)
        return [
            replace(r)
            for r in self.reservations.values()
            if r.room_id == room_id
            and r.status in wanted
            and r.check_in < check_out
            and check_in < r.check_out
        ]

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        if reservation.id in self.reservations:
            raise PersistenceError(f"Reservación duplicada: {reservation.id}")
        stored = replace(reservation, lock_version=0)
        self.reservations[stored.id] = stored
        return replace(stored)

    async def update_reservation(
        self,
        reservation_id: str,
        changes: dict[str, Any],
        expected_status: ReservationStatus | None = None,
        expected_lock_version: int | None = None,
    ) -> Reservation | None:
        current = self.reservations.get(reservation_id)
        if current is None:
            return None
        if expected_status is not None and current.status != expected_status:
            return None
        if expected_lock_version is not None and current.lock_version != expected_lock_version:
            return None
        updated = replace(current, **changes, lock_version=current.lock_version + 1)
        self.reservations[reservation_id] = updated
        return replace(updated)

    async def get_reservation(self, reservation_id: str) -> Reservation | None:
        reservation = self.reservations.get(reservation_id)
        return replace(reservation) if reservation else None

    async def get_reservation_by_checkout_session_id(self, session_id: str) -> Reservation | None:
        for reservation in self.reservations.values():
            if reservation.checkout_session_id == session_id:
                return replace(reservation)
        return None

    async def list_reservations(
        self,
        status: ReservationStatus | None = None,
        room_id: str | None = None,
        statuses: Iterable[ReservationStatus] | None = None,
        guest_search: str | None = None,
    ) -> list[ReservationWithGuest]:
        wanted = set(statuses) if statuses is not None else None
        needle = guest_search.lower() if guest_search else None
        rows = []
        for reservation in self.reservations.values():
            if status is not None and reservation.status != status:
                continue
            if room_id is not None and reservation.room_id != room_id:
                continue
            if wanted is not None and reservation.status not in wanted:
                continue
            guest = self.guests.get(reservation.guest_id)
            if needle and (guest is None or needle not in guest.name.lower()):
                continue
            rows.append(
                ReservationWithGuest(
                    reservation=replace(reservation),
                    guest=replace(guest) if guest else None,
                )
            )
        return rows

    async def delete_reservation(self, reservation_id: str) -> bool:
        return self.reservations.pop(reservation_id, None) is not None
