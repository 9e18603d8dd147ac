"""
Booking model and schemas
Canonical booking record produced by the normalizer and consumed by the layout engine
"""
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any, List, Union
from datetime import datetime

from booking_calendar.utils.helpers import serialize_day

Number = Union[int, float]


class Booking(BaseModel):
    """A normalized reservation for one logical room"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = Field(..., min_length=1)
    room: str
    guest_name: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)

    # Aware UTC datetimes; date-only inputs sit at 12:00 UTC
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    # Payload carried through untouched by the layout engine
    room_name: Optional[str] = None
    status: Optional[str] = None
    num_adult: Optional[Number] = None
    num_child: Optional[Number] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    phone: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    raw_data: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    @field_serializer("start_date", "end_date")
    def _serialize_day(self, value: Optional[datetime]) -> Optional[str]:
        return serialize_day(value)


class BookingListResponse(BaseModel):
    """Response for GET /api/bookings"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    success: bool = True
    bookings: List[Booking]
    rooms: List[str]
    data_source: str


class RoomBookingsResponse(BaseModel):
    """Response for GET /api/bookings/{room}"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    success: bool = True
    bookings: List[Booking]
    room: str
    data_source: str
