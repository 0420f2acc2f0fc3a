"""Shared pytest fixtures: calendar feed builders and sample directories."""

from datetime import datetime, timezone
from typing import Optional

import httpx
import pytest

from roomfinder.rooms import Interval, RoomDirectory, RoomId

FEED_URL = "https://calendar.example.org/rooms.ics"


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


def vevent(
    uid: str,
    location: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> str:
    """Render one VEVENT; properties passed as ``None`` are left out."""
    lines = ["BEGIN:VEVENT", f"UID:{uid}", "DTSTAMP:20240101T000000Z", "SUMMARY:Cours"]
    if start is not None:
        lines.append(f"DTSTART:{start}")
    if end is not None:
        lines.append(f"DTEND:{end}")
    if location is not None:
        lines.append(f"LOCATION:{location}")
    lines.append("END:VEVENT")
    return "\r\n".join(lines)


def calendar(*events: str) -> str:
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Test//Rooms//FR", *events, "END:VCALENDAR"]
    return "\r\n".join(lines) + "\r\n"


def mock_client(body, status_code: int = 200) -> httpx.Client:
    """An ``httpx.Client`` answering every request with ``body``."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def sample_directory() -> RoomDirectory:
    """Three rooms in two buildings, booked on 2024-01-01."""
    return RoomDirectory(
        {
            RoomId("A101"): [Interval(utc(2024, 1, 1, 9), utc(2024, 1, 1, 10))],
            RoomId("B202"): [
                Interval(utc(2024, 1, 1, 8), utc(2024, 1, 1, 9)),
                Interval(utc(2024, 1, 1, 14), utc(2024, 1, 1, 16)),
            ],
            RoomId("A102"): [Interval(utc(2024, 1, 1, 11), utc(2024, 1, 1, 12))],
        }
    )
