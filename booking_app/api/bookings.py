from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from typing import List

from booking_app.core.exceptions import BookingConflictError
from booking_app.models.booking import Booking, BookingRequest, AvailabilityRequest, AvailabilityResponse
from booking_app.services.booking_service import BookingService, get_booking_service

router = APIRouter()

@router.get("/bookings", response_model=List[Booking])
async def list_bookings(service: BookingService = Depends(get_booking_service)):
    return await service.list_bookings()

@router.post("/bookings", status_code=201, response_model=Booking)
async def create_booking(req: BookingRequest, service: BookingService = Depends(get_booking_service)):
    try:
        return await service.submit(req)
    except BookingConflictError as e:
        return JSONResponse(
            status_code=409,
            content={
                "message": "Time already booked",
                "conflicts": [c.model_dump() for c in e.conflicts],
            },
        )

@router.post("/bookings/check_availability", response_model=AvailabilityResponse)
async def check_availability(req: AvailabilityRequest, service: BookingService = Depends(get_booking_service)):
    conflicts = await service.check_availability(req.booking_date, req.booking_time)
    return AvailabilityResponse(available=not conflicts, conflicts=conflicts)

# Positional routes: a stale index is a no-op, never an error
@router.post("/bookings/at/{index}/toggle")
async def toggle_booking_at(index: int, service: BookingService = Depends(get_booking_service)):
    return {"applied": await service.toggle_completed_at(index)}

@router.delete("/bookings/at/{index}")
async def delete_booking_at(index: int, service: BookingService = Depends(get_booking_service)):
    return {"applied": await service.delete_at(index)}

@router.post("/bookings/{booking_id}/toggle")
async def toggle_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    if not await service.toggle_completed(booking_id):
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"applied": True}

@router.delete("/bookings/{booking_id}")
async def delete_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    if not await service.delete(booking_id):
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"applied": True}
