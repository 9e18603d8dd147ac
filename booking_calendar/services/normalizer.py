"""
Booking Normalizer
Maps heterogeneous upstream reservation records onto the canonical Booking model.
Reservation feeds routinely carry partial data, so nothing here raises for bad
input: unparseable fields become None and unusable records are skipped.
"""
import hashlib
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from booking_calendar.config.settings import RoomConfig
from booking_calendar.models.booking import Booking
from booking_calendar.utils.helpers import UTC, noon_utc, to_utc

logger = logging.getLogger(__name__)

DEFAULT_GUEST_NAME = "Guest"
DEFAULT_SOURCE = "direct"

# Keyword -> platform, checked in this order
PLATFORM_KEYWORDS = (
    ("airbnb", "airbnb"),
    ("booking", "booking"),
    ("expedia", "expedia"),
)
# Referrer keyword of the owned website
OWNED_SITE_KEYWORD = "pavlosol"

ARRIVAL_FIELDS = ("arrival", "arrivalDate", "firstNight", "startDate", "start")
DEPARTURE_FIELDS = ("departure", "departureDate", "endDate", "end")
# Beds24 last occupied night; checkout is the morning after
LAST_NIGHT_FIELD = "lastNight"
ROOM_ID_FIELDS = ("roomId", "room", "room_id")
ROOM_NAME_FIELDS = ("room", "roomName")
PHONE_FIELDS = ("mobile", "phone", "telephone", "tel")
REFERENCE_FIELDS = ("apiReference", "reference", "bookId", "id")
NOTE_FIELDS = ("notes", "comments", "message", "groupNote", "internalNotes", "additionalInfo")

DATE_ONLY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
ICS_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2})(\d{2})(Z?))?$")


@dataclass(frozen=True)
class SourceHints:
    """What the caller knows about where a batch of records came from"""
    rooms: Sequence[RoomConfig] = field(default_factory=tuple)
    # Room a per-room upstream query was made for
    default_room: Optional[str] = None
    # Keep only records carrying the default room's configured upstream room id
    match_room_id: bool = False


# ─── Field helpers ──────────────────────────────────────────────────────


def _first(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """First value under `keys` that is neither None nor a blank string"""
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse an upstream date into an aware UTC datetime.

    Date-only strings (YYYY-MM-DD or the compact YYYYMMDD) are pinned to noon
    UTC so the calendar day survives rendering in any timezone. Returns None
    for anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return noon_utc(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.upper().startswith("VALUE=DATE:"):
        text = text[len("VALUE=DATE:"):]
    if not text:
        return None

    try:
        match = DATE_ONLY_RE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return noon_utc(date(year, month, day))

        match = ICS_DATE_RE.match(text)
        if match:
            year, month, day, hour, minute, second, _ = match.groups()
            if hour is None:
                return noon_utc(date(int(year), int(month), int(day)))
            return UTC.localize(datetime(
                int(year), int(month), int(day), int(hour), int(minute), int(second)
            ))

        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_departure(raw: Mapping[str, Any]) -> Optional[datetime]:
    """Exclusive checkout day; a bare lastNight is moved to the following morning"""
    departure = parse_date(_first(raw, DEPARTURE_FIELDS))
    if departure is not None:
        return departure
    last_night = parse_date(_first(raw, (LAST_NIGHT_FIELD,)))
    if last_night is None:
        return None
    return last_night + timedelta(days=1)


def coerce_number(value: Any) -> Optional[float]:
    """Coerce to a finite float; absent or non-numeric values are None, zero stays zero"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_count(value: Any):
    """Like coerce_number but keeps whole counts as ints"""
    number = coerce_number(value)
    if number is None:
        return None
    return int(number) if number.is_integer() else number


def extract_guest_name(raw: Mapping[str, Any]) -> str:
    explicit = _text(raw.get("guestName"))
    if explicit:
        return explicit

    first_name = _text(raw.get("firstName") or raw.get("guestFirstName"))
    last_name = _text(raw.get("lastName") or raw.get("guestLastName"))
    full_name = " ".join(part for part in (first_name, last_name) if part)
    if full_name:
        return full_name

    return _text(raw.get("guest")) or DEFAULT_GUEST_NAME


def determine_source(raw: Mapping[str, Any]) -> str:
    """
    Classify the booking channel. Platform keywords win, then direct-channel
    signals, then the raw source or referrer text. Always returns a non-empty
    lower-case tag; unknown sources pass through verbatim.
    """
    referer = _text(raw.get("referer") or raw.get("channel")).lower()
    source = _text(raw.get("source") or raw.get("bookingSource")).lower()
    channel = _text(raw.get("channel")).lower()

    for keyword, platform in PLATFORM_KEYWORDS:
        if keyword in referer or keyword in source:
            return platform

    if (
        channel == "direct"
        or "direct" in referer
        or "direct" in source
        or OWNED_SITE_KEYWORD in referer
        or "app" in referer
        or "website" in channel
    ):
        return DEFAULT_SOURCE

    return source or referer or DEFAULT_SOURCE


def resolve_room(raw: Mapping[str, Any], hints: SourceHints) -> Optional[str]:
    """Map the upstream room identifier to a configured logical room name"""
    rooms = list(hints.rooms)
    room_id = _first(raw, ROOM_ID_FIELDS)
    room_id = _text(room_id) if room_id is not None else ""

    if hints.default_room:
        wanted = hints.default_room.lower()
        config = next((r for r in rooms if r.name.lower() == wanted), None)
        if config is None or not config.room_id or not hints.match_room_id:
            return wanted
        return wanted if room_id == str(config.room_id) else None

    if room_id:
        for config in rooms:
            if config.room_id and room_id == str(config.room_id):
                return config.name.lower()

    for key in ROOM_NAME_FIELDS:
        name = _text(raw.get(key)).lower()
        if not name:
            continue
        for config in rooms:
            if config.name.lower() == name:
                return config.name.lower()
    return None


def extract_phone(raw: Mapping[str, Any]) -> Optional[str]:
    for key in PHONE_FIELDS:
        candidate = _text(raw.get(key))
        if candidate and candidate != "0":
            return candidate
    return None


def extract_notes(raw: Mapping[str, Any]) -> Optional[str]:
    collected: List[str] = []
    for key in NOTE_FIELDS:
        note = _text(raw.get(key))
        if note and note not in collected:
            collected.append(note)
    return "\n\n".join(collected) if collected else None


def _fallback_id(room: str, start: Optional[datetime], end: Optional[datetime], guest: str) -> str:
    """Deterministic id for records that arrive without one"""
    key = "|".join([room, str(start), str(end), guest])
    return f"{room}-{hashlib.sha1(key.encode('utf-8')).hexdigest()[:12]}"


# ─── Public API ─────────────────────────────────────────────────────────


def normalize_record(raw: Any, hints: Optional[SourceHints] = None) -> Optional[Booking]:
    """Normalize one upstream record; None means the record is rejected"""
    hints = hints or SourceHints()
    if not isinstance(raw, Mapping):
        logger.warning("⚠️ Skipping non-object booking record: %r", raw)
        return None

    room = resolve_room(raw, hints)
    if room is None:
        logger.debug("Record %s matches no configured room", raw.get("bookId") or raw.get("id"))
        return None

    start_date = parse_date(_first(raw, ARRIVAL_FIELDS))
    end_date = parse_departure(raw)
    guest_name = extract_guest_name(raw)

    upstream_id = _first(raw, ("bookId", "id", "uid"))
    booking_id = _text(upstream_id) or _fallback_id(room, start_date, end_date, guest_name)
    reference = _first(raw, REFERENCE_FIELDS)
    currency = _text(raw.get("currency") or raw.get("currencyCode")).upper()

    try:
        return Booking(
            id=booking_id,
            room=room,
            guest_name=guest_name,
            source=determine_source(raw),
            start_date=start_date,
            end_date=end_date,
            room_name=_text(_first(raw, ("roomName", "propertyName", "room"))) or None,
            status=_text(raw.get("status")) or None,
            num_adult=coerce_count(_first(raw, ("numAdult", "adults"))),
            num_child=coerce_count(_first(raw, ("numChild", "children"))),
            price=coerce_number(raw.get("price")),
            currency=currency or None,
            phone=extract_phone(raw),
            reference=_text(reference) or None,
            notes=extract_notes(raw),
            raw_data=dict(raw),
        )
    except ValidationError as exc:
        logger.warning("⚠️ Skipping malformed booking record %s: %s", booking_id, exc)
        return None


def normalize(raw_records: Iterable[Any], hints: Optional[SourceHints] = None) -> List[Booking]:
    """Normalize a batch, skipping records that cannot be used"""
    bookings: List[Booking] = []
    skipped = 0
    for raw in raw_records or []:
        booking = normalize_record(raw, hints)
        if booking is None:
            skipped += 1
            continue
        bookings.append(booking)
    if skipped:
        logger.info("🧹 Normalized %d booking(s), skipped %d", len(bookings), skipped)
    return bookings


def bookings_from_payload(items: Iterable[Dict[str, Any]]) -> List[Booking]:
    """Rebuild bookings from their canonical JSON shape (camelCase keys)"""
    bookings: List[Booking] = []
    for item in items:
        try:
            data = dict(item)
            data["startDate"] = parse_date(data.get("startDate"))
            data["endDate"] = parse_date(data.get("endDate"))
            bookings.append(Booking.model_validate(data))
        except (TypeError, ValueError) as exc:
            logger.warning("⚠️ Skipping invalid booking payload: %s", exc)
    return bookings
