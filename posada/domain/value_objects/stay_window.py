"""Value Object StayWindow - estancia check-in/check-out."""

from dataclasses import dataclass
from datetime import date, timedelta

from posada.domain.errors import InvalidDateRangeError


@dataclass(frozen=True)
class StayWindow:
    """
    Value Object inmutable que representa una estancia.

    Intervalo semiabierto [start, end): la noche de check-out no se ocupa, de
    modo que otra reserva puede comenzar el mismo día en que esta termina.

    Attributes:
        start: Fecha de check-in.
        end: Fecha de check-out (exclusiva).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidDateRangeError(
                f"check_out debe ser posterior a check_in: {self.start} >= {self.end}"
            )

    @property
    def nights(self) -> int:
        """Número de noches; nunca menor que 1."""
        return max((self.end - self.start).days, 1)

    def overlaps_with(self, other: "StayWindow") -> bool:
        """Verifica si esta estancia se superpone con otra."""
        return self.start < other.end and other.start < self.end

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def dates(self) -> list[date]:
        """Noches ocupadas por la estancia, sin incluir el check-out."""
        return [self.start + timedelta(days=offset) for offset in range((self.end - self.start).days)]

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
