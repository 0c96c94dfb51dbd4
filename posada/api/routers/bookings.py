from datetime import date

from fastapi import APIRouter, Depends, Query, status

from posada.api.dependencies import get_use_cases
from posada.api.schemas.bookings import (
    AvailableRoomsResponse,
    CreateBookingRequest,
    CreateBookingResponse,
    OccupiedDatesResponse,
)

router = APIRouter()


@router.post(
    "/bookings",
    response_model=CreateBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    payload: CreateBookingRequest,
    use_cases=Depends(get_use_cases),
) -> CreateBookingResponse:
    result = await use_cases["create_booking"].execute(
        room_id=payload.room_id,
        check_in=payload.check_in,
        check_out=payload.check_out,
        guest=payload.guest.to_input(),
        occupancy=payload.occupancy,
        total_amount=payload.total_amount,
        notes=payload.notes,
    )
    return CreateBookingResponse(reservation_id=result.reservation_id, checkout_url=result.checkout_url)


@router.get("/rooms/available", response_model=AvailableRoomsResponse)
async def available_rooms(
    check_in: date = Query(...),
    check_out: date = Query(...),
    use_cases=Depends(get_use_cases),
) -> AvailableRoomsResponse:
    room_ids = await use_cases["available_rooms"].execute(check_in=check_in, check_out=check_out)
    return AvailableRoomsResponse(check_in=check_in, check_out=check_out, room_ids=room_ids)


@router.get("/rooms/{room_id}/occupied-dates", response_model=OccupiedDatesResponse)
async def occupied_dates(
    room_id: str,
    use_cases=Depends(get_use_cases),
) -> OccupiedDatesResponse:
    dates = await use_cases["occupied_dates"].execute(room_id=room_id)
    return OccupiedDatesResponse(room_id=room_id, dates=dates)
