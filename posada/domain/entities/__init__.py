"""Entidades del dominio."""

from posada.domain.entities.guest import Guest, GuestInput, Room
from posada.domain.entities.reservation import PaymentStatus, Reservation, ReservationStatus

__all__ = [
    "Guest",
    "GuestInput",
    "Room",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",
]
