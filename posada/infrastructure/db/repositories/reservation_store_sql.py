"""Implementación SQL del almacenamiento de reservas."""

import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from posada.application.interfaces.clock import Clock, SystemClock
from posada.application.interfaces.reservation_store import (
    ReservationStore,
    ReservationWithGuest,
)
from posada.application.interfaces.uuid_generator import RealUUIDGenerator, UUIDGenerator
from posada.domain.entities import (
    Guest,
    GuestInput,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Room,
)
from posada.domain.errors import PersistenceError
from posada.infrastructure.db.retry import retry_on_deadlock
from posada.infrastructure.db.tables import guests, reservations, rooms

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UPDATABLE_COLUMNS = frozenset(reservations.c.keys()) - {"id", "lock_version", "created_at"}


def _utc(value: datetime | None) -> datetime | None:
    # SQLite devuelve datetimes naive aunque la columna sea timezone=True
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_db(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _row_to_reservation(row) -> Reservation:
    return Reservation(
        id=row["id"],
        room_id=row["room_id"],
        guest_id=row["guest_id"],
        check_in=row["check_in"],
        check_out=row["check_out"],
        occupancy=row["occupancy"],
        total_amount=row["total_amount"],
        status=ReservationStatus(row["status"]),
        payment_status=PaymentStatus(row["payment_status"]),
        checkout_session_id=row["checkout_session_id"],
        payment_intent_id=row["payment_intent_id"],
        payment_method=row["payment_method"],
        payment_approved_at=_utc(row["payment_approved_at"]),
        notes=row["notes"],
        lock_version=row["lock_version"] or 0,
        created_at=_utc(row["created_at"]),
        updated_at=_utc(row["updated_at"]),
    )


def _row_to_guest(row) -> Guest:
    return Guest(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        phone=row["phone"],
        document=row["document"],
        city=row["city"],
        created_at=_utc(row["created_at"]),
        updated_at=_utc(row["updated_at"]),
    )


def _row_to_room(row) -> Room:
    return Room(
        id=row["id"],
        name=row["name"],
        active=bool(row["active"]),
        display_order=row["display_order"] or 0,
    )


class ReservationStoreSQL(ReservationStore):
    """
    Implementación con SQLAlchemy async.

    Cada operación abre su propia sesión y transacción; las escrituras se
    reintentan ante deadlocks y cualquier otro SQLAlchemyError se traduce a
    PersistenceError.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        uuid_generator: UUIDGenerator | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._uuid_generator = uuid_generator or RealUUIDGenerator()
        self._clock = clock or SystemClock()

    async def _run(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        write: bool = False,
        reraise_integrity: bool = False,
    ) -> T:
        async def attempt() -> T:
            async with self._session_factory() as session, session.begin():
                return await operation(session, *args)

        try:
            if write:
                return await retry_on_deadlock(attempt)
            return await attempt()
        except IntegrityError as exc:
            if reraise_integrity:
                raise
            logger.error("Integrity error in reservation store", extra={"error": str(exc)})
            raise PersistenceError(f"Violación de integridad: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            logger.error("Database error in reservation store", extra={"error": str(exc)})
            raise PersistenceError("Error de base de datos") from exc

    # === Guests ===

    async def upsert_guest_by_email(self, guest: GuestInput) -> Guest:
        try:
            return await self._run(self._upsert_guest, guest, write=True, reraise_integrity=True)
        except IntegrityError:
            # Otra solicitud insertó el mismo email entre el select y el insert
            return await self._run(self._upsert_guest, guest, write=True)

    async def _upsert_guest(self, session: AsyncSession, guest: GuestInput) -> Guest:
        email = guest.normalized_email()
        now = self._clock.now()
        values = {
            "name": guest.name,
            "phone": guest.phone,
            "document": guest.document,
            "city": guest.city,
            "updated_at": now,
        }
        result = await session.execute(select(guests).where(guests.c.email == email))
        row = result.mappings().first()
        if row:
            guest_id = row["id"]
            await session.execute(update(guests).where(guests.c.id == guest_id).values(values))
        else:
            guest_id = self._uuid_generator.generate_uuid()
            await session.execute(
                insert(guests).values(id=guest_id, email=email, created_at=now, **values)
            )
        result = await session.execute(select(guests).where(guests.c.id == guest_id))
        return _row_to_guest(result.mappings().one())

    async def get_guest(self, guest_id: str) -> Guest | None:
        async def operation(session: AsyncSession) -> Guest | None:
            result = await session.execute(select(guests).where(guests.c.id == guest_id))
            row = result.mappings().first()
            return _row_to_guest(row) if row else None

        return await self._run(operation)

    # === Rooms ===

    async def get_room(self, room_id: str) -> Room | None:
        async def operation(session: AsyncSession) -> Room | None:
            result = await session.execute(select(rooms).where(rooms.c.id == room_id))
            row = result.mappings().first()
            return _row_to_room(row) if row else None

        return await self._run(operation)

    async def list_rooms(self, active_only: bool = True) -> list[Room]:
        async def operation(session: AsyncSession) -> list[Room]:
            stmt = select(rooms).order_by(rooms.c.display_order, rooms.c.name)
            if active_only:
                stmt = stmt.where(rooms.c.active.is_(True))
            result = await session.execute(stmt)
            return [_row_to_room(row) for row in result.mappings().all()]

        return await self._run(operation)

    async def add_room(self, room: Room) -> Room:
        async def operation(session: AsyncSession) -> Room:
            await session.execute(
                insert(rooms).values(
                    id=room.id,
                    name=room.name,
                    active=room.active,
                    display_order=room.display_order,
                )
            )
            return room

        return await self._run(operation, write=True)

    # === Reservations ===

    async def find_overlapping(
        self,
        room_id: str,
        check_in: date,
        check_out: date,
        statuses: Iterable[ReservationStatus],
    ) -> list[Reservation]:
        status_values = [_to_db(status) for status in statuses]

        async def operation(session: AsyncSession) -> list[Reservation]:
            stmt = select(reservations).where(
                reservations.c.room_id == room_id,
                reservations.c.status.in_(status_values),
                reservations.c.check_in < check_out,
                reservations.c.check_out > check_in,
            )
            result = await session.execute(stmt)
            return [_row_to_reservation(row) for row in result.mappings().all()]

        return await self._run(operation)

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        async def operation(session: AsyncSession) -> Reservation:
            await session.execute(
                insert(reservations).values(
                    id=reservation.id,
                    room_id=reservation.room_id,
                    guest_id=reservation.guest_id,
                    check_in=reservation.check_in,
                    check_out=reservation.check_out,
                    occupancy=reservation.occupancy,
                    total_amount=reservation.total_amount,
                    status=_to_db(reservation.status),
                    payment_status=_to_db(reservation.payment_status),
                    checkout_session_id=reservation.checkout_session_id,
                    payment_intent_id=reservation.payment_intent_id,
                    payment_method=reservation.payment_method,
                    payment_approved_at=reservation.payment_approved_at,
                    notes=reservation.notes,
                    lock_version=0,
                    created_at=reservation.created_at,
                    updated_at=reservation.updated_at,
                )
            )
            result = await session.execute(
                select(reservations).where(reservations.c.id == reservation.id)
            )
            return _row_to_reservation(result.mappings().one())

        return await self._run(operation, write=True)

    async def update_reservation(
        self,
        reservation_id: str,
        changes: dict[str, Any],
        expected_status: ReservationStatus | None = None,
        expected_lock_version: int | None = None,
    ) -> Reservation | None:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columnas no actualizables: {sorted(unknown)}")
        values = {key: _to_db(value) for key, value in changes.items()}
        values["lock_version"] = reservations.c.lock_version + 1

        async def operation(session: AsyncSession) -> Reservation | None:
            stmt = update(reservations).where(reservations.c.id == reservation_id)
            if expected_status is not None:
                stmt = stmt.where(reservations.c.status == _to_db(expected_status))
            if expected_lock_version is not None:
                stmt = stmt.where(reservations.c.lock_version == expected_lock_version)
            result = await session.execute(stmt.values(values))
            if result.rowcount == 0:
                return None
            result = await session.execute(
                select(reservations).where(reservations.c.id == reservation_id)
            )
            return _row_to_reservation(result.mappings().one())

        return await self._run(operation, write=True)

    async def get_reservation(self, reservation_id: str) -> Reservation | None:
        async def operation(session: AsyncSession) -> Reservation | None:
            result = await session.execute(
                select(reservations).where(reservations.c.id == reservation_id)
            )
            row = result.mappings().first()
            return _row_to_reservation(row) if row else None

        return await self._run(operation)

    async def get_reservation_by_checkout_session_id(self, session_id: str) -> Reservation | None:
        async def operation(session: AsyncSession) -> Reservation | None:
            result = await session.execute(
                select(reservations)
                .where(reservations.c.checkout_session_id == session_id)
                .limit(1)
            )
            row = result.mappings().first()
            return _row_to_reservation(row) if row else None

        return await self._run(operation)

    async def list_reservations(
        self,
        status: ReservationStatus | None = None,
        room_id: str | None = None,
        statuses: Iterable[ReservationStatus] | None = None,
        guest_search: str | None = None,
    ) -> list[ReservationWithGuest]:
        guest_columns = [column.label(f"g_{column.name}") for column in guests.c]
        stmt = (
            select(reservations, *guest_columns)
            .select_from(reservations.outerjoin(guests, guests.c.id == reservations.c.guest_id))
            .order_by(reservations.c.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(reservations.c.status == _to_db(status))
        if room_id is not None:
            stmt = stmt.where(reservations.c.room_id == room_id)
        if statuses is not None:
            stmt = stmt.where(reservations.c.status.in_([_to_db(s) for s in statuses]))
        if guest_search:
            stmt = stmt.where(func.lower(guests.c.name).contains(guest_search.lower(), autoescape=True))

        async def operation(session: AsyncSession) -> list[ReservationWithGuest]:
            result = await session.execute(stmt)
            rows = []
            for row in result.mappings().all():
                guest_row = {column.name: row[f"g_{column.name}"] for column in guests.c}
                guest = _row_to_guest(guest_row) if guest_row["id"] is not None else None
                rows.append(ReservationWithGuest(reservation=_row_to_reservation(row), guest=guest))
            return rows

        return await self._run(operation)

    async def delete_reservation(self, reservation_id: str) -> bool:
        async def operation(session: AsyncSession) -> bool:
            result = await session.execute(
                delete(reservations).where(reservations.c.id == reservation_id)
            )
            return result.rowcount > 0

        return await self._run(operation, write=True)
