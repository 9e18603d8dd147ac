"""
Booking source
Chooses where bookings come from (Beds24, ICS feeds or sample data), fetches
them fresh for every request and hands back normalized bookings.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from booking_calendar.config.settings import RoomConfig, settings
from booking_calendar.models.booking import Booking
from booking_calendar.services.beds24_client import Beds24Client
from booking_calendar.services.ics_parser import events_to_records, parse_ics
from booking_calendar.services.normalizer import SourceHints, normalize
from booking_calendar.services.sample_data import generate_sample_bookings
from booking_calendar.utils.helpers import today_in

logger = logging.getLogger(__name__)

DATA_SOURCE_BEDS24 = "beds24"
DATA_SOURCE_ICS = "ics"
DATA_SOURCE_SAMPLE = "sample"


class BookingSourceError(Exception):
    """No bookings could be fetched from the configured upstream"""


@dataclass
class FetchResult:
    bookings: List[Booking]
    data_source: str
    stats: List[Dict[str, Any]] = field(default_factory=list)


class BookingSource:
    """Fetches and normalizes bookings for the configured rooms."""

    def __init__(
        self,
        rooms: Optional[Sequence[RoomConfig]] = None,
        token: Optional[str] = settings.BEDS24_API_TOKEN,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.rooms = list(rooms if rooms is not None else settings.ROOMS)
        self.token = token
        self._transport = transport
        self._today = today or (lambda: today_in(settings.CALENDAR_TIMEZONE))
        self.last_stats: List[Dict[str, Any]] = []

    @property
    def data_source(self) -> str:
        if self.token:
            return DATA_SOURCE_BEDS24
        if any(room.ics_url for room in self.rooms):
            return DATA_SOURCE_ICS
        return DATA_SOURCE_SAMPLE

    @property
    def room_names(self) -> List[str]:
        return [room.name.lower() for room in self.rooms]

    def _select(self, room_names: Optional[Sequence[str]]) -> List[RoomConfig]:
        if room_names is None:
            return self.rooms
        wanted = {name.lower() for name in room_names}
        return [room for room in self.rooms if room.name.lower() in wanted]

    def _hints(self, room: RoomConfig, match_room_id: bool = False) -> SourceHints:
        return SourceHints(rooms=tuple(self.rooms), default_room=room.name, match_room_id=match_room_id)

    # ─── Fetch ──────────────────────────────────────────────────────────

    async def fetch(self, room_names: Optional[Sequence[str]] = None) -> FetchResult:
        """Fetch fresh bookings for all rooms, or only `room_names`"""
        rooms = self._select(room_names)
        source = self.data_source

        if source == DATA_SOURCE_SAMPLE:
            logger.info("🧪 No upstream configured, using sample data")
            self.last_stats = []
            today = self._today()
            bookings: List[Booking] = []
            for room in rooms:
                bookings.extend(normalize(generate_sample_bookings(room.name, today), self._hints(room)))
            return FetchResult(bookings=bookings, data_source=source)

        if source == DATA_SOURCE_BEDS24:
            fetch_room = self._fetch_beds24_room
        else:
            fetch_room = self._fetch_ics_room

        results = await asyncio.gather(*(fetch_room(room) for room in rooms), return_exceptions=True)

        bookings = []
        stats = []
        failures = 0
        for room, result in zip(rooms, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures += 1
                logger.error("❌ Error fetching bookings for %s: %s", room.name, result)
                stats.append({"room": room.name, "error": str(result)})
                continue
            room_bookings, room_stats = result
            bookings.extend(room_bookings)
            stats.append(room_stats)

        self.last_stats = stats
        if rooms and failures == len(rooms):
            raise BookingSourceError(f"All {failures} room fetch(es) from {source} failed")

        logger.info("📅 Fetched %d booking(s) from %s", len(bookings), source)
        return FetchResult(bookings=bookings, data_source=source, stats=stats)

    async def _fetch_beds24_room(self, room: RoomConfig):
        start = self._today() - timedelta(days=settings.FETCH_BUFFER_DAYS)
        end = start + timedelta(days=settings.FETCH_RANGE_DAYS)
        client = Beds24Client(self.token, transport=self._transport)

        records = await client.get_bookings_by_date_range(start, end, room.property_id, room.room_id)
        bookings = normalize(records, self._hints(room, match_room_id=True))
        logger.info(
            "[Beds24] %s: %d from API, %d after room filter",
            room.name, len(records), len(bookings),
        )
        return bookings, {
            "room": room.name,
            "totalFromApi": len(records),
            "afterRoomFilter": len(bookings),
        }

    async def _fetch_ics_room(self, room: RoomConfig):
        if not room.ics_url:
            return [], {"room": room.name, "totalFromApi": 0, "afterRoomFilter": 0}

        try:
            async with httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
                                         transport=self._transport) as client:
                resp = await client.get(room.ics_url)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise BookingSourceError(f"ICS feed for {room.name} failed: {exc}") from exc

        records = events_to_records(parse_ics(resp.text))
        bookings = normalize(records, self._hints(room))
        return bookings, {
            "room": room.name,
            "totalFromApi": len(records),
            "afterRoomFilter": len(bookings),
        }


booking_source = BookingSource()


def get_booking_source() -> BookingSource:
    """FastAPI dependency returning the process-wide booking source"""
    return booking_source
