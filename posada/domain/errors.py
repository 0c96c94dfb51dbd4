"""Excepciones de dominio para el sistema de reservas."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(
            message=f"Validación fallida en '{field}': {message}",
            code=code,
        )
        self.field = field


class InvalidDateRangeError(ValidationError):
    """Rango de fechas inválido."""

    def __init__(self, message: str):
        super().__init__(field="check_out", message=message, code="INVALID_DATE_RANGE")


class InvalidMoneyError(ValidationError):
    """Monto monetario inválido."""

    def __init__(self, message: str):
        super().__init__(field="total_amount", message=message, code="INVALID_MONEY")


# === Errores de Reserva ===


class UnavailableError(DomainError):
    """La habitación ya está ocupada en las fechas solicitadas."""

    def __init__(self, room_id: str, check_in: str, check_out: str):
        super().__init__(
            message=f"Habitación {room_id} no disponible entre {check_in} y {check_out}",
            code="ROOM_UNAVAILABLE",
        )
        self.room_id = room_id
        self.check_in = check_in
        self.check_out = check_out


class ReservationNotFoundError(DomainError):
    """La reservación no existe."""

    def __init__(self, reservation_id: str):
        super().__init__(
            message=f"Reservación no encontrada: {reservation_id}",
            code="RESERVATION_NOT_FOUND",
        )
        self.reservation_id = reservation_id


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar la reservación."""

    def __init__(self, reservation_id: str, expected_version: int):
        super().__init__(
            message=f"Conflicto de concurrencia en reservación {reservation_id}: "
            f"la versión {expected_version} ya no es la actual",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.reservation_id = reservation_id
        self.expected_version = expected_version


# === Errores de infraestructura ===


class GatewayError(DomainError):
    """Falla de red o respuesta de error de la pasarela de pago."""

    def __init__(self, message: str, http_status: int | None = None):
        super().__init__(message=message, code="PAYMENT_GATEWAY_ERROR")
        self.http_status = http_status


class PersistenceError(DomainError):
    """Falla del almacenamiento de reservas."""

    def __init__(self, message: str):
        super().__init__(message=message, code="PERSISTENCE_ERROR")


# === Errores de Webhook ===


class SignatureError(DomainError):
    """La notificación de la pasarela no pudo autenticarse."""

    def __init__(self, message: str, code: str = "INVALID_SIGNATURE"):
        super().__init__(message=message, code=code)


class InvalidSignatureHeaderError(SignatureError):
    def __init__(self, message: str = "Cabecera de firma inválida"):
        super().__init__(message=message, code="INVALID_SIGNATURE_HEADER")


class SignatureMismatchError(SignatureError):
    def __init__(self, message: str = "La firma no coincide con el contenido"):
        super().__init__(message=message, code="SIGNATURE_MISMATCH")


class StaleTimestampError(SignatureError):
    def __init__(self, tolerance_seconds: int):
        super().__init__(
            message=f"Timestamp de firma fuera de la ventana de tolerancia de {tolerance_seconds}s",
            code="STALE_TIMESTAMP",
        )
        self.tolerance_seconds = tolerance_seconds


class MalformedPayloadError(SignatureError):
    def __init__(self, message: str = "Payload de webhook inválido"):
        super().__init__(message=message, code="MALFORMED_PAYLOAD")


class WebhookNotConfiguredError(DomainError):
    """No hay secreto de webhook configurado en el servidor."""

    def __init__(self) -> None:
        super().__init__(
            message="STRIPE_WEBHOOK_SECRET no configurada",
            code="WEBHOOK_NOT_CONFIGURED",
        )


# === Errores de Administración ===


class AdminAuthorizationError(DomainError):
    """Sesión administrativa inválida o credencial secundaria incorrecta."""

    def __init__(self, message: str = "Sesión administrativa inválida o expirada", forbidden: bool = False):
        super().__init__(message=message, code="ADMIN_FORBIDDEN" if forbidden else "ADMIN_UNAUTHORIZED")
        self.forbidden = forbidden
