"""
Tests for the Beds24 API client, driven through httpx.MockTransport
"""
import asyncio
from datetime import date

import httpx
import pytest

from booking_calendar.services.beds24_client import Beds24Client, Beds24Error


def client_for(handler):
    return Beds24Client("secret-token", base_url="https://beds24.test/v2", transport=httpx.MockTransport(handler))


def test_date_range_query_and_headers():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["token"] = request.headers.get("token")
        return httpx.Response(200, json={"success": True, "data": [{"bookId": 1}, {"bookId": 2}, "junk"]})

    records = asyncio.run(client_for(handler).get_bookings_by_date_range(
        date(2024, 1, 1), date(2024, 12, 31), property_id="298408",
    ))

    assert records == [{"bookId": 1}, {"bookId": 2}]
    assert seen["token"] == "secret-token"
    assert seen["url"].path == "/v2/bookings"
    params = seen["url"].params
    assert params["arrivalFrom"] == "2024-01-01"
    assert params["arrivalTo"] == "2024-12-31"
    assert params["propId"] == "298408"
    assert "roomId" not in params


@pytest.mark.parametrize("payload, expected", [
    ([{"id": "a"}], [{"id": "a"}]),
    ({"bookings": [{"id": "b"}]}, [{"id": "b"}]),
    ({"data": [{"id": "c"}]}, [{"id": "c"}]),
    ({"unexpected": True}, []),
])
def test_extract_records(payload, expected):
    assert Beds24Client.extract_records(payload) == expected


def test_error_responses_raise():
    def unauthorized(request):
        return httpx.Response(401, json={"success": False, "error": "Token is not valid"})

    with pytest.raises(Beds24Error, match="Token is not valid"):
        asyncio.run(client_for(unauthorized).get_bookings())

    def soft_failure(request):
        return httpx.Response(200, json={"success": False})

    with pytest.raises(Beds24Error, match="200"):
        asyncio.run(client_for(soft_failure).get_bookings())


def test_invalid_json_raises():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(Beds24Error, match="invalid JSON"):
        asyncio.run(client_for(handler).get_bookings())


def test_network_errors_raise():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(Beds24Error, match="request failed"):
        asyncio.run(client_for(handler).get_bookings())


def test_missing_token_raises():
    with pytest.raises(Beds24Error, match="not configured"):
        asyncio.run(Beds24Client(None).get_bookings())
