from fastapi import APIRouter, Depends, Query, status

from posada.api.dependencies import get_admin_token, get_use_cases
from posada.api.schemas.admin import (
    AdminReservationItem,
    DeleteReservationRequest,
    ReservationResponse,
    SetStatusRequest,
)
from posada.api.schemas.bookings import CreateBookingRequest

router = APIRouter(prefix="/admin")


@router.get("/reservations", response_model=list[AdminReservationItem])
async def list_reservations(
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    admin_token: str | None = Depends(get_admin_token),
    use_cases=Depends(get_use_cases),
) -> list[AdminReservationItem]:
    rows = await use_cases["list_reservations"].execute(
        admin_token=admin_token, status=status_filter, search=search
    )
    return [AdminReservationItem.from_row(row) for row in rows]


@router.post(
    "/reservations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_manual_booking(
    payload: CreateBookingRequest,
    admin_token: str | None = Depends(get_admin_token),
    use_cases=Depends(get_use_cases),
) -> ReservationResponse:
    reservation = await use_cases["create_manual_booking"].execute(
        admin_token=admin_token,
        room_id=payload.room_id,
        check_in=payload.check_in,
        check_out=payload.check_out,
        guest=payload.guest.to_input(),
        occupancy=payload.occupancy,
        total_amount=payload.total_amount,
        notes=payload.notes,
    )
    return ReservationResponse.from_entity(reservation)


@router.patch("/reservations/{reservation_id}/status", response_model=ReservationResponse)
async def set_reservation_status(
    reservation_id: str,
    payload: SetStatusRequest,
    admin_token: str | None = Depends(get_admin_token),
    use_cases=Depends(get_use_cases),
) -> ReservationResponse:
    reservation = await use_cases["set_status"].execute(
        admin_token=admin_token,
        reservation_id=reservation_id,
        new_status=payload.status,
        expected_lock_version=payload.expected_lock_version,
    )
    return ReservationResponse.from_entity(reservation)


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: str,
    payload: DeleteReservationRequest,
    admin_token: str | None = Depends(get_admin_token),
    use_cases=Depends(get_use_cases),
) -> None:
    await use_cases["delete_reservation"].execute(
        admin_token=admin_token,
        reservation_id=reservation_id,
        password=payload.password,
    )
