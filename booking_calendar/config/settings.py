"""
Application settings and configuration
"""
import os
from dataclasses import dataclass
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class RoomConfig:
    """A logical room and the upstream identifiers it maps to"""
    name: str
    property_id: Optional[str] = None
    room_id: Optional[str] = None
    ics_url: Optional[str] = None


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return int(value)


def load_room_config() -> List[RoomConfig]:
    """Build the room list from ROOMS plus <NAME>_PROPERTY_ID / _ROOM_ID / _ICS_URL"""
    names = [n.strip().lower() for n in os.getenv("ROOMS", "jason,smile,maria").split(",")]
    rooms = []
    for name in names:
        if not name:
            continue
        prefix = name.upper()
        rooms.append(RoomConfig(
            name=name,
            property_id=os.getenv(f"{prefix}_PROPERTY_ID") or None,
            room_id=os.getenv(f"{prefix}_ROOM_ID") or None,
            ics_url=os.getenv(f"{prefix}_ICS_URL") or None,
        ))
    return rooms


class Settings:
    # Application
    APP_NAME = "Booking Calendar"
    VERSION = "1.0.0"
    DEBUG = os.getenv("DEBUG", "False") == "True"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Beds24 API v2
    BEDS24_API_TOKEN = os.getenv("BEDS24_API_TOKEN") or None
    BEDS24_BASE_URL = os.getenv("BEDS24_BASE_URL", "https://api.beds24.com/v2")
    UPSTREAM_TIMEOUT_SECONDS = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30"))

    # Rooms shown on the calendar, in display order
    ROOMS = load_room_config()

    # Upstream fetch range, relative to today
    FETCH_BUFFER_DAYS = _env_int("FETCH_BUFFER_DAYS", 7)
    FETCH_RANGE_DAYS = _env_int("FETCH_RANGE_DAYS", 365)

    # Timeline
    TIMELINE_DAYS = _env_int("TIMELINE_DAYS", 365)
    DEFAULT_DAY_WIDTH = float(os.getenv("DEFAULT_DAY_WIDTH", "40"))
    CALENDAR_TIMEZONE = os.getenv("CALENDAR_TIMEZONE", "UTC")
    RESIZE_DEBOUNCE_MS = _env_int("RESIZE_DEBOUNCE_MS", 150)

    # Row geometry (px)
    LANE_SPACING = 38
    BAR_HEIGHT = 30
    BASE_TOP = 15
    MIN_ROW_HEIGHT = 60
    BAR_GAP = 4

    @property
    def room_names(self) -> List[str]:
        return [room.name.lower() for room in self.ROOMS]

settings = Settings()
