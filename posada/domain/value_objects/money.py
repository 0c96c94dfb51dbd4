"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from posada.domain.errors import InvalidMoneyError


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal (hasta 2 decimales).
        currency_code: Código ISO 4217 de la moneda (ej: BRL, USD).
    """

    amount: Decimal
    currency_code: str = "BRL"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if len(self.currency_code) != 3:
            raise InvalidMoneyError(f"currency_code debe ser de 3 caracteres: {self.currency_code}")

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    def to_minor_units(self) -> int:
        """
        Convierte a centavos (unidad mínima que espera Stripe).

        Raises:
            InvalidMoneyError: Si el resultado no es un entero positivo.
        """
        cents = int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        if cents <= 0:
            raise InvalidMoneyError(f"Monto inválido para pago: {self.amount}")
        return cents
