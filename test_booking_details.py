"""
Tests for the booking details card values
"""
from datetime import date

from booking_calendar.models.booking import Booking
from booking_calendar.services.booking_details import (
    NOT_PROVIDED,
    booking_details,
    format_charges_eur,
    telephone_href,
)
from booking_calendar.utils.helpers import noon_utc


def test_missing_values_read_not_provided_but_zero_is_kept():
    booking = Booking(
        id="d-1",
        room="maria",
        guest_name="Guest",
        source="direct",
        start_date=noon_utc(date(2024, 3, 15)),
        num_adult=0,
        reference="REF-1",
    )

    details = booking_details(booking)

    assert details["adults"] == "0"
    assert details["children"] == NOT_PROVIDED
    assert details["charges"] == NOT_PROVIDED
    assert details["phone"] == NOT_PROVIDED
    assert details["phoneHref"] is None
    assert details["notes"] == NOT_PROVIDED
    assert details["checkIn"] == "Mar 15, 2024"
    assert details["checkOut"] == NOT_PROVIDED
    # Direct bookings carry no channel reference
    assert details["reference"] == NOT_PROVIDED


def test_ota_booking_details():
    booking = Booking(
        id="7781",
        room="jason",
        guest_name="Ana Lopez",
        source="airbnb",
        start_date=noon_utc(date(2024, 12, 30)),
        end_date=noon_utc(date(2025, 1, 2)),
        num_adult=2,
        num_child=1,
        price=1234.5,
        currency="GBP",
        phone="+30 (690) 123-4567",
        notes="Late arrival",
    )

    details = booking_details(booking)

    assert details["reference"] == "7781"
    assert details["phoneHref"] == "tel:+306901234567"
    assert details["charges"] == "€1,234.50 (GBP)"
    assert details["checkOut"] == "Jan 2, 2025"
    assert details["adults"] == "2"
    assert details["notes"] == "Late arrival"


def test_charge_formatting():
    assert format_charges_eur(0.0) == "€0.00"
    assert format_charges_eur(99.999, "eur") == "€100.00"
    assert format_charges_eur(-5) == "-€5.00"
    assert format_charges_eur(None) == NOT_PROVIDED


def test_telephone_href_needs_digits():
    assert telephone_href("call me") is None
    assert telephone_href("") is None
