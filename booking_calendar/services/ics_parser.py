"""
iCalendar (ICS) feed parsing
Channel calendars export reservations as VEVENTs; each event becomes a raw
record that the normalizer understands.
"""
import re
from typing import Any, Dict, List

GUEST_NAME_PATTERNS = (
    re.compile(r"^Reserved for ", re.IGNORECASE),
    re.compile(r"^Reservation - ", re.IGNORECASE),
    re.compile(r" - Airbnb$", re.IGNORECASE),
    re.compile(r" - Booking\.com$", re.IGNORECASE),
)


def unfold_lines(ics_data: str) -> List[str]:
    """Join RFC 5545 continuation lines (leading space or tab) onto their parent"""
    lines: List[str] = []
    for line in re.split(r"\r?\n", ics_data):
        if line[:1] in (" ", "\t") and lines:
            lines[-1] += line.strip()
        else:
            lines.append(line.strip())
    return lines


def parse_ics(ics_data: str) -> List[Dict[str, str]]:
    """Extract the VEVENT properties the calendar cares about"""
    events: List[Dict[str, str]] = []
    current = None

    for line in unfold_lines(ics_data or ""):
        if line == "BEGIN:VEVENT":
            current = {}
        elif line == "END:VEVENT" and current is not None:
            events.append(current)
            current = None
        elif current is not None:
            key, sep, value = line.partition(":")
            if not sep or not key:
                continue
            if key.startswith("DTSTART"):
                current["start"] = value
            elif key.startswith("DTEND"):
                current["end"] = value
            elif key == "SUMMARY":
                current["summary"] = value
            elif key == "DESCRIPTION":
                current["description"] = value
            elif key == "UID":
                current["uid"] = value
            elif key == "LOCATION":
                current["location"] = value

    return events


def extract_guest_name(summary: str) -> str:
    """Strip channel boilerplate such as 'Reserved for' from an event summary"""
    if not summary:
        return "Guest"
    name = summary
    for pattern in GUEST_NAME_PATTERNS:
        name = pattern.sub("", name)
    return name.strip() or "Guest"


def determine_source(event: Dict[str, str]) -> str:
    """Channel feeds only come from airbnb or booking.com; airbnb when unclear"""
    haystack = " ".join(
        (event.get(key) or "").lower() for key in ("summary", "description", "uid")
    )
    if "airbnb" in haystack:
        return "airbnb"
    if "booking" in haystack:
        return "booking"
    return "airbnb"


def events_to_records(events: List[Dict[str, str]]) -> List[Dict[str, Any]]:
    """Shape parsed events like upstream booking records"""
    records = []
    for event in events:
        record = {
            "guestName": extract_guest_name(event.get("summary", "")),
            "arrival": event.get("start"),
            "departure": event.get("end"),
            "source": determine_source(event),
            "notes": event.get("description"),
            "location": event.get("location"),
        }
        if event.get("uid"):
            record["id"] = event["uid"]
        records.append(record)
    return records
