"""
Circuit Breaker para las llamadas a Stripe.

Evita seguir golpeando la API de Stripe cuando falla de forma consecutiva:
- CLOSED: operación normal, las llamadas pasan
- OPEN: demasiados fallos, las llamadas fallan de inmediato
- HALF_OPEN: se deja pasar una llamada para comprobar la recuperación
"""

import logging

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


class StateChangeLogger(CircuitBreakerListener):
    """Registra en el log cada cambio de estado del breaker."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "Circuit breaker state changed",
            extra={
                "breaker_name": self.name,
                "old_state": old_state.name if old_state else None,
                "new_state": new_state.name,
            },
        )


stripe_breaker = CircuitBreaker(
    fail_max=5,  # Open circuit after 5 consecutive failures
    reset_timeout=60,  # Wait 60 seconds before attempting recovery
    name="stripe_circuit_breaker",
    listeners=[StateChangeLogger("stripe")],
)


__all__ = [
    "stripe_breaker",
    "CircuitBreakerError",
]
