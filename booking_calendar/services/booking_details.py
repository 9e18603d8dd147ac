"""
Booking details card
Display values for the guest details panel. Missing values are shown as
"Not provided"; a zero is a real value and is shown as such.
"""
import re
from datetime import datetime
from typing import Any, Dict, Optional

from booking_calendar.models.booking import Booking
from booking_calendar.utils.helpers import calendar_day

NOT_PROVIDED = "Not provided"
REFERENCE_SOURCES = ("booking", "airbnb")


def format_full_date(value: Optional[datetime]) -> str:
    day = calendar_day(value)
    if day is None:
        return NOT_PROVIDED
    return f"{day:%b} {day.day}, {day.year}"


def format_count(value: Any) -> str:
    if value is None:
        return NOT_PROVIDED
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def format_charges_eur(price: Optional[float], currency: Optional[str] = None) -> str:
    if price is None:
        return NOT_PROVIDED
    sign = "-" if price < 0 else ""
    formatted = f"{sign}€{abs(price):,.2f}"
    if currency and currency.upper() != "EUR":
        return f"{formatted} ({currency.upper()})"
    return formatted


def telephone_href(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    digits = re.sub(r"[^0-9+]", "", phone)
    return f"tel:{digits}" if digits else None


def booking_reference(booking: Booking) -> Optional[str]:
    """Channel reference, only meaningful for OTA bookings"""
    source = booking.source.lower()
    if not any(name in source for name in REFERENCE_SOURCES):
        return None
    return booking.reference or booking.id


def booking_details(booking: Booking) -> Dict[str, Any]:
    return {
        "id": booking.id,
        "guestName": booking.guest_name,
        "source": booking.source,
        "room": booking.room,
        "reference": booking_reference(booking) or NOT_PROVIDED,
        "phone": booking.phone or NOT_PROVIDED,
        "phoneHref": telephone_href(booking.phone),
        "checkIn": format_full_date(booking.start_date),
        "checkOut": format_full_date(booking.end_date),
        "adults": format_count(booking.num_adult),
        "children": format_count(booking.num_child),
        "charges": format_charges_eur(booking.price, booking.currency),
        "notes": booking.notes or NOT_PROVIDED,
    }
