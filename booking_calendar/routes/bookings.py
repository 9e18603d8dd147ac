from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from typing import Optional

from booking_calendar.config.settings import settings
from booking_calendar.models.booking import BookingListResponse, RoomBookingsResponse
from booking_calendar.models.layout import LayoutResponse
from booking_calendar.services.booking_details import booking_details
from booking_calendar.services.booking_source import BookingSource, get_booking_source
from booking_calendar.services.calendar_context import ALL_SOURCES, CalendarContext, parse_month

router = APIRouter(tags=["Bookings"])


@router.get("/bookings", response_model=BookingListResponse)
async def get_bookings(source: BookingSource = Depends(get_booking_source)):
    """All bookings for every configured room"""
    result = await source.fetch()
    return BookingListResponse(
        bookings=result.bookings,
        rooms=source.room_names,
        data_source=result.data_source,
    )


@router.get("/bookings/details/{booking_id}")
async def get_booking_details(booking_id: str, source: BookingSource = Depends(get_booking_source)):
    """Guest details card for one booking"""
    result = await source.fetch()
    booking = next((b for b in result.bookings if str(b.id) == booking_id), None)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"success": True, "details": booking_details(booking)}


@router.get("/bookings/{room}", response_model=RoomBookingsResponse)
async def get_room_bookings(room: str, source: BookingSource = Depends(get_booking_source)):
    """Bookings of a single room (name matched case-insensitively)"""
    room_name = room.lower()
    if room_name not in source.room_names:
        return JSONResponse(status_code=404, content={"success": False, "error": "Room not found"})

    result = await source.fetch([room_name])
    return RoomBookingsResponse(
        bookings=[b for b in result.bookings if b.room == room_name],
        room=room_name,
        data_source=result.data_source,
    )


@router.get("/layout", response_model=LayoutResponse)
async def get_calendar_layout(
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="First month shown, YYYY-MM"),
    days: int = Query(settings.TIMELINE_DAYS, ge=1, le=3660),
    day_width: float = Query(settings.DEFAULT_DAY_WIDTH, alias="dayWidth", ge=0),
    source_filter: str = Query(ALL_SOURCES, alias="filter"),
    selected: Optional[str] = None,
    source: BookingSource = Depends(get_booking_source),
):
    """Timeline geometry for every room, ready to be absolutely positioned"""
    try:
        current_month = parse_month(month) if month else None
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    context = CalendarContext(
        current_month=current_month,
        source_filter=source_filter,
        timeline_days=days,
        day_width=day_width,
        selected_booking_id=selected,
    )
    result = await source.fetch()
    view = context.render(result.bookings, rooms=source.room_names)

    return LayoutResponse(
        window=view.window,
        rooms=view.rooms,
        filter=view.filter,
        selected_booking_id=view.selected_booking_id,
        data_source=result.data_source,
        resize_debounce_ms=settings.RESIZE_DEBOUNCE_MS,
    )


@router.get("/sources/stats")
async def get_source_stats(source: BookingSource = Depends(get_booking_source)):
    """Per-room counts from the most recent upstream fetch"""
    return {"success": True, "dataSource": source.data_source, "stats": source.last_stats}
