"""
Beds24 API v2 client
Fetches raw reservation records; normalization happens in the normalizer.
"""
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from booking_calendar.config.settings import settings
from booking_calendar.utils.helpers import format_api_date

logger = logging.getLogger(__name__)


class Beds24Error(Exception):
    """The Beds24 API could not be reached or answered with an error"""


class Beds24Client:
    """Thin async wrapper around GET /bookings."""

    def __init__(
        self,
        token: Optional[str],
        base_url: str = settings.BEDS24_BASE_URL,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    # ─── Requests ───────────────────────────────────────────────────────

    async def get_bookings(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch raw booking records matching `params`"""
        if not self.token:
            raise Beds24Error("Beds24 API token is not configured")

        query = {
            key: value
            for key, value in (params or {}).items()
            if value is not None and value != ""
        }
        url = f"{self.base_url}/bookings"
        headers = {"token": self.token, "accept": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=query, headers=headers)
        except httpx.HTTPError as exc:
            raise Beds24Error(f"Beds24 request failed: {exc}") from exc

        text = resp.text
        try:
            data = json.loads(text) if text else {}
        except ValueError as exc:
            raise Beds24Error(f"Beds24 API returned invalid JSON: {text[:200]}") from exc

        failed = isinstance(data, dict) and (data.get("success") is False or data.get("error"))
        if resp.is_error or failed:
            logger.warning("⚠️ Beds24 error response: %s", text[:500])
            message = None
            if isinstance(data, dict):
                message = data.get("error")
            raise Beds24Error(message or f"Beds24 API error: {resp.status_code} {resp.reason_phrase}")

        records = self.extract_records(data)
        logger.info("📥 Beds24 returned %d booking(s) for %s", len(records), query)
        return records

    async def get_bookings_by_date_range(
        self,
        start: date,
        end: date,
        property_id: Optional[str] = None,
        room_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Bookings arriving between `start` and `end`, optionally for one property/room"""
        params = {
            "arrivalFrom": format_api_date(start),
            "arrivalTo": format_api_date(end),
            "propId": property_id,
            "roomId": room_id,
        }
        return await self.get_bookings(params)

    # ─── Parse ──────────────────────────────────────────────────────────

    @staticmethod
    def extract_records(data: Any) -> List[Dict[str, Any]]:
        """Unwrap the record list from a bare list or a {bookings|data: [...]} envelope"""
        if isinstance(data, list):
            records = data
        elif isinstance(data, dict) and isinstance(data.get("bookings"), list):
            records = data["bookings"]
        elif isinstance(data, dict) and isinstance(data.get("data"), list):
            records = data["data"]
        else:
            records = []
        return [record for record in records if isinstance(record, dict)]
