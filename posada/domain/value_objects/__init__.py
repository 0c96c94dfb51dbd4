"""Value Objects del dominio."""

from posada.domain.value_objects.money import Money
from posada.domain.value_objects.stay_window import StayWindow

__all__ = [
    "Money",
    "StayWindow",
]
