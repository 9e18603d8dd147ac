"""
Print the timeline layout of the configured rooms as text.

Usage:
    python scripts/print_layout.py [YYYY-MM] [bookings.json] [--months N] [--select BOOKING_ID]

Without a bookings file the configured booking source is queried (sample data
when no upstream is configured). A bookings file holds the JSON returned by
GET /api/bookings. Each of the N months is printed on its own; a selected
booking is marked with '@' instead of '#'.
"""
import argparse
import asyncio
import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from booking_calendar.services.booking_source import booking_source
from booking_calendar.services.calendar_context import CalendarContext
from booking_calendar.services.normalizer import bookings_from_payload


def print_view(view, source):
    print(f"📅 {view.window.start} .. {view.window.end} ({source})")
    for room, result in view.rooms.items():
        print(f"\n{room.upper()}  lanes={result.lane_count} height={result.row_height:.0f}px")
        for bar in result.bars:
            lane = bar.lane
            mark = "@" if bar.booking.id == view.selected_booking_id else "#"
            track = [" "] * result.total_days
            for offset in range(lane.start_offset_days, lane.end_offset_days):
                track[offset] = mark
            print(f"  L{lane.lane_index} |{''.join(track)}| {bar.booking.guest_name} ({bar.booking.source})")


async def main(month: str = None, path: str = None, months: int = 1, selected: str = None):
    if path:
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
        bookings = bookings_from_payload(payload.get("bookings", []))
        source = f"file {path}"
    else:
        result = await booking_source.fetch()
        bookings = result.bookings
        source = result.data_source

    context = CalendarContext(timeline_days=31)
    if month:
        context.jump_to_month(month)
    if selected and context.select_booking(selected, bookings) is None:
        print(f"⚠️ Booking {selected} not found")

    for index in range(months):
        if index:
            context.change_month(1)
            print()
        print_view(context.render(bookings, rooms=booking_source.room_names), source)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print the booking timeline as text")
    parser.add_argument("month", nargs="?", help="first month shown, YYYY-MM")
    parser.add_argument("bookings", nargs="?", help="JSON saved from GET /api/bookings")
    parser.add_argument("--months", type=int, default=1)
    parser.add_argument("--select", dest="selected")
    args = parser.parse_args()
    asyncio.run(main(args.month, args.bookings, args.months, args.selected))
