"""
Timeline Layout Engine
Turns the bookings of a room into positioned bars on a day grid.

Pure and synchronous: the same bookings, window and day width always produce
the same LayoutResult, so callers may re-run it freely on every resize.
"""
import math
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from booking_calendar.config.settings import settings
from booking_calendar.models.booking import Booking
from booking_calendar.models.layout import LaneAssignment, LayoutBar, LayoutResult, VisibleWindow
from booking_calendar.utils.helpers import calendar_day, days_between


def _check_day_width(day_width_px: float) -> float:
    if day_width_px is None or not math.isfinite(day_width_px) or day_width_px < 0:
        raise ValueError(f"day width must be a finite non-negative number, got {day_width_px!r}")
    return float(day_width_px)


def clip_to_window(check_in: date, check_out: date, window: VisibleWindow) -> Optional[Tuple[int, int]]:
    """
    Clip the stay [check_in, check_out) to the window and return
    (start_offset, end_offset) in days from window.start, or None when
    nothing of the stay is visible. Checkout is exclusive.
    """
    clipped_start = max(check_in, window.start)
    clipped_end = min(check_out, window.end_exclusive)
    if clipped_end <= clipped_start:
        return None

    total_days = window.total_days
    start_offset = min(max(0, days_between(window.start, clipped_start)), total_days)
    end_offset = min(max(start_offset, days_between(window.start, clipped_end)), total_days)
    if end_offset - start_offset <= 0:
        return None
    return start_offset, end_offset


def assign_lanes(intervals: Iterable[Tuple[int, int]]) -> Tuple[List[int], int]:
    """
    Greedy first-fit lane packing over day intervals [start, end).

    `intervals` must arrive ordered by start. Each one goes into the lowest
    lane whose last bar has ended by the time it starts (end <= start, so a
    checkout day can host the next check-in); if every lane is busy a new
    lane is opened. Processing in start order means a new lane is only opened
    when all existing lanes overlap the current start, so the lane count
    equals the maximum number of simultaneously overlapping stays.

    Runs in O(n x lanes). Returns (lane index per interval, lanes used).
    """
    lane_end_offsets: List[int] = []
    lanes: List[int] = []
    for start_offset, end_offset in intervals:
        lane_index = 0
        while lane_index < len(lane_end_offsets) and lane_end_offsets[lane_index] > start_offset:
            lane_index += 1
        if lane_index == len(lane_end_offsets):
            lane_end_offsets.append(end_offset)
        else:
            lane_end_offsets[lane_index] = end_offset
        lanes.append(lane_index)
    return lanes, len(lane_end_offsets)


def row_height(lane_count: int) -> float:
    """Vertical extent a room row needs to fit `lane_count` lanes"""
    lanes = max(1, lane_count)
    content = settings.BASE_TOP * 2 + settings.BAR_HEIGHT + (lanes - 1) * settings.LANE_SPACING
    return float(max(settings.MIN_ROW_HEIGHT, content))


def layout(bookings_for_room: Sequence[Booking], window: VisibleWindow, day_width_px: float,
           room: Optional[str] = None) -> LayoutResult:
    """Lay out one room's bookings inside the visible window"""
    day_width = _check_day_width(day_width_px)

    # Whole calendar days only; bookings missing either date cannot be drawn
    stays = []
    for booking in bookings_for_room:
        check_in = calendar_day(booking.start_date)
        check_out = calendar_day(booking.end_date)
        if check_in is None or check_out is None:
            continue
        stays.append((check_in, check_out, booking))

    # sorted() is stable, so equal check-ins keep their input order
    stays = sorted(stays, key=lambda stay: stay[0])

    visible = []
    for check_in, check_out, booking in stays:
        offsets = clip_to_window(check_in, check_out, window)
        if offsets is not None:
            visible.append((offsets, booking))

    lanes, lanes_used = assign_lanes(offsets for offsets, _ in visible)

    bars: List[LayoutBar] = []
    for ((start_offset, end_offset), booking), lane_index in zip(visible, lanes):
        assignment = LaneAssignment(
            lane_index=lane_index,
            start_offset_days=start_offset,
            duration_days=end_offset - start_offset,
        )
        bars.append(LayoutBar(
            booking=booking,
            lane=assignment,
            left=start_offset * day_width,
            width=max(0.0, assignment.duration_days * day_width - settings.BAR_GAP),
            top=float(settings.BASE_TOP + lane_index * settings.LANE_SPACING),
        ))

    if room is None:
        room = bookings_for_room[0].room if bookings_for_room else ""

    return LayoutResult(
        room=room,
        total_days=window.total_days,
        day_width=day_width,
        track_width=window.total_days * day_width,
        lane_count=max(1, lanes_used),
        row_height=row_height(lanes_used),
        bars=bars,
    )


def get_layout(bookings: Sequence[Booking], window: VisibleWindow, day_width_px: float,
               rooms: Optional[Sequence[str]] = None) -> Dict[str, LayoutResult]:
    """
    Lay out every room. Rooms default to the configured room list; bookings
    are matched to rooms case-insensitively and rooms keep their given order.
    """
    _check_day_width(day_width_px)
    room_names = list(rooms) if rooms is not None else settings.room_names

    by_room: Dict[str, List[Booking]] = {name.lower(): [] for name in room_names}
    for booking in bookings:
        key = booking.room.lower()
        if key in by_room:
            by_room[key].append(booking)

    return {
        name: layout(by_room[name.lower()], window, day_width_px, room=name)
        for name in room_names
    }
