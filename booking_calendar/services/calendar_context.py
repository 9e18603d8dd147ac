"""
Calendar context
Session state of one calendar view: the month being looked at, the source
filter and the selected booking. It is passed explicitly into rendering
instead of living in module globals.
"""
import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence

from booking_calendar.config.settings import settings
from booking_calendar.models.booking import Booking
from booking_calendar.models.layout import LayoutResult, VisibleWindow
from booking_calendar.services.layout import get_layout
from booking_calendar.utils.helpers import add_months, first_of_month, today_in

ALL_SOURCES = "all"
MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(value: str) -> date:
    """'YYYY-MM' -> first day of that month"""
    match = MONTH_RE.match(value or "")
    if not match:
        raise ValueError(f"month must look like YYYY-MM, got {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {value!r}")
    return date(year, month, 1)


@dataclass
class CalendarView:
    window: VisibleWindow
    rooms: Dict[str, LayoutResult]
    filter: str
    selected_booking_id: Optional[str]


class CalendarContext:
    """Navigation, filter and selection state for one calendar session."""

    def __init__(
        self,
        current_month: Optional[date] = None,
        source_filter: str = ALL_SOURCES,
        timeline_days: int = settings.TIMELINE_DAYS,
        day_width: float = settings.DEFAULT_DAY_WIDTH,
        selected_booking_id: Optional[str] = None,
    ):
        if timeline_days < 1:
            raise ValueError("timeline must show at least one day")
        self.current_month = first_of_month(current_month or today_in(settings.CALENDAR_TIMEZONE))
        self.source_filter = source_filter or ALL_SOURCES
        self.timeline_days = timeline_days
        self.day_width = day_width
        self.selected_booking_id = selected_booking_id

    # ─── Navigation ─────────────────────────────────────────────────────

    def change_month(self, delta: int) -> date:
        self.current_month = add_months(self.current_month, delta)
        return self.current_month

    def jump_to_month(self, value: str) -> date:
        self.current_month = parse_month(value)
        return self.current_month

    def visible_window(self) -> VisibleWindow:
        return VisibleWindow.spanning(self.current_month, self.timeline_days)

    # ─── Filter & selection ─────────────────────────────────────────────

    def set_filter(self, source_filter: str) -> None:
        self.source_filter = source_filter or ALL_SOURCES

    def filtered_bookings(self, bookings: Sequence[Booking]) -> List[Booking]:
        if self.source_filter == ALL_SOURCES:
            return list(bookings)
        return [b for b in bookings if b.source == self.source_filter]

    def select_booking(self, booking_id: str, bookings: Sequence[Booking]) -> Optional[Booking]:
        """Select a booking if it exists; unknown ids leave the selection alone"""
        if not booking_id:
            return None
        booking = next((b for b in bookings if str(b.id) == str(booking_id)), None)
        if booking is not None:
            self.selected_booking_id = str(booking.id)
        return booking

    def reconcile_selection(self, visible: Sequence[Booking]) -> Optional[str]:
        """Drop the selection once its booking is no longer in the filtered set"""
        if self.selected_booking_id and not any(
            str(b.id) == self.selected_booking_id for b in visible
        ):
            self.selected_booking_id = None
        return self.selected_booking_id

    # ─── Render ─────────────────────────────────────────────────────────

    def render(self, bookings: Sequence[Booking], rooms: Optional[Sequence[str]] = None) -> CalendarView:
        """Filter, reconcile the selection and lay out every room"""
        filtered = self.filtered_bookings(bookings)
        self.reconcile_selection(filtered)
        window = self.visible_window()
        return CalendarView(
            window=window,
            rooms=get_layout(filtered, window, self.day_width, rooms=rooms),
            filter=self.source_filter,
            selected_booking_id=self.selected_booking_id,
        )
