import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from posada.api.deps import engine
from posada.api.routers.admin import router as admin_router
from posada.api.routers.bookings import router as bookings_router
from posada.api.routers.health import router as health_router
from posada.api.routers.webhooks import router as webhooks_router
from posada.domain.errors import (
    AdminAuthorizationError,
    DomainError,
    GatewayError,
    OptimisticLockError,
    PersistenceError,
    ReservationNotFoundError,
    SignatureError,
    UnavailableError,
    ValidationError,
    WebhookNotConfiguredError,
)
from posada.infrastructure.db.tables import metadata

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/api/v1/admin"

# (status HTTP, mensaje genérico para huéspedes; None = mostrar el mensaje de dominio)
DOMAIN_ERROR_RESPONSES: list[tuple[type[DomainError], int, str | None]] = [
    (ValidationError, 422, None),
    (UnavailableError, 409, "Selected dates are no longer available"),
    (GatewayError, 502, "Could not complete booking, please try again"),
    (PersistenceError, 500, "Internal server error"),
    (SignatureError, 400, "Invalid webhook signature"),
    (WebhookNotConfiguredError, 503, "Webhook not configured"),
    (ReservationNotFoundError, 404, None),
    (OptimisticLockError, 409, None),
]


def domain_error_status(exc: DomainError) -> tuple[int, str | None]:
    if isinstance(exc, AdminAuthorizationError):
        return (403 if exc.forbidden else 401), None
    for error_type, status_code, public_message in DOMAIN_ERROR_RESPONSES:
        if isinstance(exc, error_type):
            return status_code, public_message
    return 400, None


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB tables (for dev/demo purposes)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield
    # Cleanup
    await engine.dispose()

app = FastAPI(
    title="Posada Reservations API",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code, public_message = domain_error_status(exc)
    is_admin = request.url.path.startswith(ADMIN_PATH_PREFIX)
    # Admins ven el mensaje de dominio; las firmas de webhook nunca se detallan
    if is_admin and not isinstance(exc, SignatureError):
        public_message = None

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Domain error",
        extra={
            "code": exc.code,
            "error": exc.message,
            "path": request.url.path,
            "method": request.method,
            "status_code": status_code,
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": public_message or exc.message, "code": exc.code},
    )


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    # Log the full error with context for internal debugging
    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
app.include_router(webhooks_router, prefix="/api/v1", tags=["Webhooks"])
app.include_router(admin_router, prefix="/api/v1", tags=["Admin"])
