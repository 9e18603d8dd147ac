"""
Tests for the booking normalizer
"""
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from booking_calendar.config.settings import RoomConfig
from booking_calendar.services.normalizer import (
    SourceHints,
    coerce_count,
    coerce_number,
    determine_source,
    extract_guest_name,
    extract_notes,
    normalize,
    normalize_record,
    parse_date,
    resolve_room,
)
from booking_calendar.utils.helpers import calendar_day

ROOMS = (
    RoomConfig(name="jason", property_id="298408", room_id="611111"),
    RoomConfig(name="smile", property_id="298408"),
    RoomConfig(name="maria"),
)
HINTS = SourceHints(rooms=ROOMS)


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
@pytest.mark.parametrize("tz", ["Pacific/Kiritimati", "Pacific/Pago_Pago", "UTC", "America/Los_Angeles"])
def test_date_only_strings_keep_their_day_in_any_timezone(monkeypatch, tz):
    monkeypatch.setenv("TZ", tz)
    time.tzset()
    try:
        parsed = parse_date("2024-03-15")
        assert calendar_day(parsed) == date(2024, 3, 15)
        assert parsed.hour == 12
        assert parsed.utcoffset() == timedelta(0)
    finally:
        monkeypatch.undo()
        time.tzset()


def test_parse_date_formats():
    assert parse_date("2024-03-15T08:30:00Z") == datetime(2024, 3, 15, 8, 30, tzinfo=timezone.utc)
    assert parse_date("2024-03-15T23:30:00-05:00") == datetime(2024, 3, 16, 4, 30, tzinfo=timezone.utc)
    assert parse_date("2024-03-15T10:00:00") == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)
    assert calendar_day(parse_date("20240315")) == date(2024, 3, 15)
    assert calendar_day(parse_date("VALUE=DATE:20240315")) == date(2024, 3, 15)
    assert parse_date("20240315T140000Z") == datetime(2024, 3, 15, 14, tzinfo=timezone.utc)
    assert calendar_day(parse_date(date(2024, 3, 15))) == date(2024, 3, 15)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-02-30", 12345, True])
def test_unparseable_dates_are_none(value):
    assert parse_date(value) is None


def test_guest_name_fallbacks():
    assert extract_guest_name({"guestName": "Ana Lopez", "firstName": "X"}) == "Ana Lopez"
    assert extract_guest_name({"firstName": "Ana", "lastName": "Lopez"}) == "Ana Lopez"
    assert extract_guest_name({"guestFirstName": "Ana"}) == "Ana"
    assert extract_guest_name({"lastName": "Lopez"}) == "Lopez"
    assert extract_guest_name({"guest": "Walk-in"}) == "Walk-in"
    assert extract_guest_name({"guestName": "   "}) == "Guest"
    assert extract_guest_name({}) == "Guest"


@pytest.mark.parametrize("raw, expected", [
    ({"referer": "Airbnb.com"}, "airbnb"),
    ({"source": "Booking.com"}, "booking"),
    ({"bookingSource": "EXPEDIA partner"}, "expedia"),
    ({"channel": "airbnb"}, "airbnb"),
    ({"channel": "direct"}, "direct"),
    ({"channel": "Website"}, "direct"),
    ({"referer": "pavlosol.gr"}, "direct"),
    ({"referer": "MyApp"}, "direct"),
    ({"source": "Direct booking"}, "booking"),
    ({"source": "VRBO"}, "vrbo"),
    ({"referer": "Agoda"}, "agoda"),
    ({"source": "", "channel": ""}, "direct"),
    ({}, "direct"),
])
def test_source_classification(raw, expected):
    assert determine_source(raw) == expected


def test_room_resolution_without_default_room():
    assert resolve_room({"roomId": 611111}, HINTS) == "jason"
    assert resolve_room({"room": "Smile"}, HINTS) == "smile"
    assert resolve_room({"roomName": "MARIA"}, HINTS) == "maria"
    assert resolve_room({"roomId": "999"}, HINTS) is None
    assert resolve_room({}, HINTS) is None


def test_room_resolution_for_per_room_queries():
    jason = SourceHints(rooms=ROOMS, default_room="jason", match_room_id=True)
    smile = SourceHints(rooms=ROOMS, default_room="smile", match_room_id=True)

    assert resolve_room({"roomId": "611111"}, jason) == "jason"
    assert resolve_room({"roomId": "222222"}, jason) is None
    # No room id configured: everything from the property belongs to the room
    assert resolve_room({"roomId": "222222"}, smile) == "smile"
    assert resolve_room({}, smile) == "smile"


def test_per_room_feeds_without_upstream_room_ids_keep_every_record():
    jason = SourceHints(rooms=ROOMS, default_room="jason")

    # Sample and ICS records only carry the logical room name
    assert resolve_room({"room": "jason"}, jason) == "jason"
    assert resolve_room({}, jason) == "jason"


def test_room_names_match_case_insensitively_on_both_sides():
    rooms = (RoomConfig(name="Jason", room_id="611111"), RoomConfig(name="Smile"))

    assert resolve_room({"room": "SMILE"}, SourceHints(rooms=rooms)) == "smile"
    assert resolve_room({"roomId": 611111}, SourceHints(rooms=rooms)) == "jason"
    per_room = SourceHints(rooms=rooms, default_room="jason", match_room_id=True)
    assert resolve_room({"roomId": "611111"}, per_room) == "jason"
    assert resolve_room({"roomId": "1"}, per_room) is None


def test_numbers_keep_zero_and_reject_junk():
    assert coerce_number("12.5") == 12.5
    assert coerce_number(0) == 0.0
    assert coerce_number("0") == 0.0
    assert coerce_number(None) is None
    assert coerce_number("") is None
    assert coerce_number("abc") is None
    assert coerce_number("inf") is None
    assert coerce_number(float("nan")) is None
    assert coerce_count("2") == 2
    assert isinstance(coerce_count("2"), int)
    assert coerce_count(1.5) == 1.5


def test_notes_are_trimmed_and_deduplicated():
    raw = {"notes": " Late arrival ", "comments": "Late arrival", "message": "Needs cot", "groupNote": ""}
    assert extract_notes(raw) == "Late arrival\n\nNeeds cot"
    assert extract_notes({}) is None


def test_normalize_beds24_record():
    raw = {
        "bookId": 7781,
        "firstName": "Maria",
        "lastName": "Papadopoulou",
        "arrival": "2024-03-15",
        "departure": "2024-03-18",
        "roomId": 611111,
        "referer": "Booking.com",
        "numAdult": "2",
        "numChild": 0,
        "price": "345.50",
        "currency": "eur",
        "mobile": "+30 690 000 0000",
        "phone": "0",
        "apiReference": "BDC-123",
        "status": "confirmed",
    }

    booking = normalize_record(raw, HINTS)

    assert booking.id == "7781"
    assert booking.room == "jason"
    assert booking.guest_name == "Maria Papadopoulou"
    assert booking.source == "booking"
    assert calendar_day(booking.start_date) == date(2024, 3, 15)
    assert calendar_day(booking.end_date) == date(2024, 3, 18)
    assert booking.num_adult == 2
    assert booking.num_child == 0
    assert booking.price == 345.5
    assert booking.currency == "EUR"
    assert booking.phone == "+30 690 000 0000"
    assert booking.reference == "BDC-123"
    assert booking.raw_data["bookId"] == 7781


def test_json_shape():
    booking = normalize_record(
        {"id": "x1", "guestName": "Bob", "arrival": "2024-03-15", "departure": None, "room": "maria"},
        HINTS,
    )

    data = booking.model_dump(by_alias=True, mode="json")

    assert data["startDate"] == "2024-03-15"
    assert data["endDate"] is None
    assert data["guestName"] == "Bob"
    assert data["numAdult"] is None
    assert data["price"] is None
    assert data["source"] == "direct"
    assert "rawData" not in data


def test_missing_id_gets_a_stable_fallback():
    raw = {"guestName": "Bob", "arrival": "2024-03-15", "departure": "2024-03-17", "room": "maria"}

    first = normalize_record(raw, HINTS)
    second = normalize_record(dict(raw), HINTS)

    assert first.id == second.id
    assert first.id.startswith("maria-")


def test_bad_records_do_not_abort_the_batch():
    records = [
        None,
        "garbage",
        {"id": "lost", "room": "nowhere", "arrival": "2024-01-01"},
        {"id": "ok", "room": "jason", "arrival": "bad", "departure": "2024-01-05"},
        {"id": "fine", "room": "smile", "arrival": "2024-01-01", "departure": "2024-01-05"},
    ]

    bookings = normalize(records, HINTS)

    assert [b.id for b in bookings] == ["ok", "fine"]
    assert bookings[0].start_date is None
    assert normalize([], HINTS) == []


def test_mobile_is_preferred_over_landline():
    booking = normalize_record(
        {"id": "p1", "room": "maria", "arrival": "2024-03-15", "departure": "2024-03-16",
         "phone": "+30 210 000 0000", "mobile": "+30 690 111 1111"},
        HINTS,
    )

    assert booking.phone == "+30 690 111 1111"


def test_last_night_is_followed_by_checkout_morning():
    one_night = normalize_record(
        {"bookId": 5, "roomId": 611111, "firstNight": "2024-03-15", "lastNight": "2024-03-15"},
        HINTS,
    )
    explicit = normalize_record(
        {"bookId": 6, "roomId": 611111, "firstNight": "2024-03-15", "lastNight": "2024-03-15",
         "departure": "2024-03-17"},
        HINTS,
    )

    assert calendar_day(one_night.start_date) == date(2024, 3, 15)
    assert calendar_day(one_night.end_date) == date(2024, 3, 16)
    assert calendar_day(explicit.end_date) == date(2024, 3, 17)
