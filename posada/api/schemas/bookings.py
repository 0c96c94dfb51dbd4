from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field, condecimal, constr, field_validator

from posada.domain.entities import GuestInput

Amount = condecimal(max_digits=12, decimal_places=2, gt=0)


class GuestPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = None
    document: str | None = None
    city: str | None = None

    def to_input(self) -> GuestInput:
        return GuestInput(
            name=self.name,
            email=str(self.email),
            phone=self.phone,
            document=self.document,
            city=self.city,
        )


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_id: constr(strip_whitespace=True, min_length=1)
    check_in: date
    check_out: date
    guest: GuestPayload
    occupancy: int = Field(default=1, ge=1)
    total_amount: Amount
    notes: str | None = None

    @field_validator("check_out")
    @classmethod
    def validate_check_out(cls, value: date, info) -> date:
        check_in = info.data.get("check_in")
        if check_in and value <= check_in:
            raise ValueError("check_out must be after check_in")
        return value


class CreateBookingResponse(BaseModel):
    reservation_id: str
    checkout_url: str


class OccupiedDatesResponse(BaseModel):
    room_id: str
    dates: list[date]


class AvailableRoomsResponse(BaseModel):
    check_in: date
    check_out: date
    room_ids: list[str]
