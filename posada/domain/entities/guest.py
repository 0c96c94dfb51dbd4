"""Entidades Guest y Room."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Guest:
    """
    Huésped identificado por su email.

    Se crea o actualiza (upsert) en cada intento de reserva; nunca se duplica
    para el mismo email.
    """

    id: str
    name: str
    email: str
    phone: str | None = None
    document: str | None = None
    city: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def first_name(self) -> str:
        """Extrae el primer nombre del nombre completo."""
        parts = self.name.split()
        return parts[0] if parts else ""


@dataclass
class GuestInput:
    """Datos del huésped tal como llegan en una solicitud de reserva."""

    name: str
    email: str
    phone: str | None = None
    document: str | None = None
    city: str | None = None

    def normalized_email(self) -> str:
        return self.email.strip().lower()


@dataclass
class Room:
    """Habitación. Solo lectura para el núcleo de reservas."""

    id: str
    name: str
    active: bool = True
    display_order: int = 0
