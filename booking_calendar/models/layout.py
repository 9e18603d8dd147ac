"""
Timeline layout schemas
Visible window, per-bar lane assignment and per-room layout results
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List
from datetime import date, timedelta

from booking_calendar.models.booking import Booking


class VisibleWindow(BaseModel):
    """Inclusive range of calendar days shown on the timeline"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "VisibleWindow":
        if self.end < self.start:
            raise ValueError("window end must not be before window start")
        return self

    @property
    def end_exclusive(self) -> date:
        return self.end + timedelta(days=1)

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    @classmethod
    def spanning(cls, start: date, days: int) -> "VisibleWindow":
        """Window of `days` consecutive days starting at `start`"""
        if days < 1:
            raise ValueError("a window must span at least one day")
        return cls(start=start, end=start + timedelta(days=days - 1))


class LaneAssignment(BaseModel):
    """Where a bar sits on the room's grid, in whole days"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    lane_index: int = Field(..., ge=0)
    start_offset_days: int = Field(..., ge=0)
    duration_days: int = Field(..., ge=1)

    @property
    def end_offset_days(self) -> int:
        return self.start_offset_days + self.duration_days


class LayoutBar(BaseModel):
    """One positioned booking bar (pixel geometry relative to the room track)"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    booking: Booking
    lane: LaneAssignment
    left: float
    width: float
    top: float


class LayoutResult(BaseModel):
    """Layout of a single room row"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    room: str
    total_days: int
    day_width: float
    track_width: float
    lane_count: int
    row_height: float
    bars: List[LayoutBar] = Field(default_factory=list)


class LayoutResponse(BaseModel):
    """Response for GET /api/layout"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    success: bool = True
    window: VisibleWindow
    rooms: Dict[str, LayoutResult]
    filter: str
    selected_booking_id: Optional[str] = None
    data_source: str
    resize_debounce_ms: int
