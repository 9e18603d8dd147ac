"""
Sample booking data, served when no upstream source is configured
"""
import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

SAMPLE_SOURCES = ["airbnb", "booking"]
SAMPLE_GUESTS = ["John Smith", "Jane Doe", "Bob Wilson", "Alice Johnson", "Mike Brown"]


def generate_sample_bookings(room_name: str, today: date, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """
    5-9 raw bookings over the next 90 days, 2-8 nights each.

    Seeded per room and day unless an rng is given, so ids stay the same
    across reloads on the same day.
    """
    rng = rng or random.Random(f"{room_name}:{today.isoformat()}")
    stamp = today.strftime("%Y%m%d")
    records = []

    for i in range(5 + rng.randrange(5)):
        start = today + timedelta(days=rng.randrange(90))
        nights = 2 + rng.randrange(7)
        records.append({
            "id": f"{room_name}-{i}-{stamp}",
            "guestName": rng.choice(SAMPLE_GUESTS),
            "arrival": start.isoformat(),
            "departure": (start + timedelta(days=nights)).isoformat(),
            "source": rng.choice(SAMPLE_SOURCES),
            "room": room_name,
            "numAdult": 1 + rng.randrange(4),
            "numChild": rng.randrange(3),
            "price": float(nights * (60 + rng.randrange(60))),
            "currency": "EUR",
        })

    return records
