from datetime import datetime
from typing import List, Optional

from booking_app.core.config import settings
from booking_app.core.exceptions import BookingConflictError
from booking_app.core.logger import logger
from booking_app.models.booking import Booking, BookingRequest
from booking_app.services.conflict_service import find_conflicts
from booking_app.services.store_service import BookingStore


def _flip_completed(booking: Booking) -> Booking:
    return booking.model_copy(update={"completed": not booking.completed})


class BookingService:
    def __init__(self, store: Optional[BookingStore] = None, min_separation: Optional[int] = None):
        self.store = store or BookingStore(settings.BOOKINGS_FILE)
        self.min_separation = min_separation if min_separation is not None else settings.MIN_SEPARATION_MINUTES

    async def list_bookings(self) -> List[Booking]:
        return await self.store.load()

    async def check_availability(self, booking_date: str, booking_time: str) -> List[Booking]:
        """
        Returns the stored bookings that would block the given slot.
        An empty list means the slot is free.
        """
        existing = await self.store.load()
        return find_conflicts(booking_date, booking_time, existing, self.min_separation)

    async def submit(self, request: BookingRequest) -> Booking:
        """
        Creates a booking if its slot is free.
        Raises BookingConflictError when the slot is taken and lets
        PersistenceError through when the booking could not be saved.
        """
        logger.info(f"📥 Booking request - Date: {request.booking_date}, Time: {request.booking_time}")

        booking = Booking(
            name=request.name,
            address=request.address,
            booked_on=datetime.now().strftime("%Y-%m-%d"),
            booking_date=request.booking_date,
            booking_time=request.booking_time,
        )

        conflicts = []

        def slot_is_free(existing: List[Booking]) -> bool:
            conflicts.extend(find_conflicts(booking.booking_date, booking.booking_time, existing, self.min_separation))
            return not conflicts

        if not await self.store.append_if(booking, slot_is_free):
            logger.info(f"⛔ {booking.booking_date} {booking.booking_time} rejected, {len(conflicts)} conflicting booking(s)")
            raise BookingConflictError(booking.booking_date, booking.booking_time, conflicts)

        logger.info(f"✅ Booking accepted for {booking.name} on {booking.booking_date} at {booking.booking_time}")
        return booking

    async def toggle_completed_at(self, index: int) -> bool:
        return await self.store.update_at(index, _flip_completed)

    async def delete_at(self, index: int) -> bool:
        return await self.store.delete_at(index)

    async def toggle_completed(self, booking_id: str) -> bool:
        return await self.store.update_by_id(booking_id, _flip_completed)

    async def delete(self, booking_id: str) -> bool:
        return await self.store.delete_by_id(booking_id)


_booking_service: Optional[BookingService] = None

def get_booking_service() -> BookingService:
    """FastAPI dependency returning the process-wide service (one store, one lock)."""
    global _booking_service
    if _booking_service is None:
        _booking_service = BookingService()
    return _booking_service
