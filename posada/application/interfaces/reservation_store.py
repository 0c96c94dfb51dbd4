from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from posada.domain.entities import Guest, GuestInput, Reservation, ReservationStatus, Room


@dataclass
class ReservationWithGuest:
    reservation: Reservation
    guest: Guest | None


class ReservationStore:
    """
    Puerto del almacenamiento de reservas.

    Las escrituras son last-write-wins salvo cuando se pasa una guarda
    (`expected_status` o `expected_lock_version`) a `update_reservation`.
    """

    async def upsert_guest_by_email(self, guest: GuestInput) -> Guest:
        raise NotImplementedError

    async def get_guest(self, guest_id: str) -> Guest | None:
        raise NotImplementedError

    async def get_room(self, room_id: str) -> Room | None:
        raise NotImplementedError

    async def list_rooms(self, active_only: bool = True) -> list[Room]:
        raise NotImplementedError

    async def find_overlapping(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        statuses: Iterable[ReservationStatus],
    ) -> list[Reservation]:
        """Reservas de la habitación con estado en `statuses` cuyo intervalo se superpone."""
        raise NotImplementedError

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        raise NotImplementedError

    async def update_reservation(
        self,
        reservation_id: str,
        changes: dict[str, Any],
        expected_status: ReservationStatus | None = None,
        expected_lock_version: int | None = None,
    ) -> Reservation | None:
        """
        Aplica `changes` e incrementa lock_version.

        Returns:
            La reservación actualizada, o None si no existe o alguna guarda no
            se cumplió.
        """
        raise NotImplementedError

    async def get_reservation(self, reservation_id: str) -> Reservation | None:
        raise NotImplementedError

    async def get_reservation_by_checkout_session_id(self, session_id: str) -> Reservation | None:
        raise NotImplementedError

    async def list_reservations(
        self,
        status: ReservationStatus | None = None,
        room_id: str | None = None,
        statuses: Iterable[ReservationStatus] | None = None,
        guest_search: str | None = None,
    ) -> list[ReservationWithGuest]:
        raise NotImplementedError

    async def delete_reservation(self, reservation_id: str) -> bool:
        raise NotImplementedError
