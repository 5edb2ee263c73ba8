from typing import List
from uuid import uuid4
from pydantic import BaseModel, Field, TypeAdapter

class Booking(BaseModel):
    name: str
    address: str
    booked_on: str = ""  # YYYY-MM-DD, stamped once at creation
    booking_date: str = ""  # YYYY-MM-DD
    booking_time: str = ""  # HH:MM, 24h
    completed: bool = False
    id: str = Field(default_factory=lambda: uuid4().hex)

class BookingRequest(BaseModel):
    name: str
    address: str
    booking_date: str = ""
    booking_time: str = ""

class AvailabilityRequest(BaseModel):
    booking_date: str
    booking_time: str

class AvailabilityResponse(BaseModel):
    available: bool
    conflicts: List[Booking] = Field(default_factory=list)

# Whole-document codec for the store
BookingList = TypeAdapter(List[Booking])
