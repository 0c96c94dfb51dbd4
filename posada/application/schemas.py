from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from posada.domain.constants import METADATA_RESERVATION_ID


class StripeEventData(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: dict[str, Any]


class StripeEvent(BaseModel):
    """Envoltura mínima de un evento de Stripe ya autenticado."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    data: StripeEventData
    livemode: bool | None = None
    created: int | None = None


class CheckoutSessionObject(BaseModel):
    """Campos de `data.object` que la conciliación usa en eventos checkout.session.*"""

    model_config = ConfigDict(extra="allow")

    id: str
    payment_status: str | None = None
    payment_intent: str | dict[str, Any] | None = None
    payment_method_types: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    client_reference_id: str | None = None

    @property
    def payment_intent_id(self) -> str | None:
        if isinstance(self.payment_intent, dict):
            return self.payment_intent.get("id")
        return self.payment_intent

    @property
    def payment_method(self) -> str | None:
        return self.payment_method_types[0] if self.payment_method_types else None

    @property
    def metadata_reservation_id(self) -> str | None:
        value = (self.metadata or {}).get(METADATA_RESERVATION_ID)
        return str(value) if value else None
