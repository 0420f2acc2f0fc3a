"""Calendar feed client for the room availability service.

This module downloads the iCalendar feed that lists room bookings, parses
its events and builds a ``RoomDirectory`` from them. It encapsulates retry
logic with exponential back-off for transient HTTP errors. Individual
events that are incomplete, malformed or unrelated to room bookings are
skipped rather than failing the whole ingestion, since real feeds contain
plenty of them.

The functions here are deliberately synchronous. Async callers run them in
a worker thread.
"""

from __future__ import annotations

import logging
import re
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Iterator, NamedTuple, Optional, Tuple, Union

import httpx
from icalendar import Calendar, Component

from .rooms import Interval, MalformedRoomLabel, RoomDirectory, RoomFinderError, RoomId

logger = logging.getLogger(__name__)

# LOCATION values of room bookings in this building start with this marker.
ROOM_LOCATION_PREFIX = "DLST-"

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"
_TIMESTAMP_RE = re.compile(r"[0-9]{8}T[0-9]{6}Z")

# Status codes worth retrying: rate limiting and upstream hiccups.
RETRY_STATUSES: Tuple[int, ...] = (429, 500, 502, 503, 504)


class IngestError(RoomFinderError):
    """Base class for feed-level failures that abort an ingestion."""


class FetchError(IngestError):
    """The feed could not be retrieved over HTTP."""


class FeedFormatError(IngestError):
    """The payload is not a calendar document, or holds no calendar."""


class Booking(NamedTuple):
    room: RoomId
    interval: Interval


class Skipped(NamedTuple):
    reason: str


def fetch_feed(
    url: str,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0,
    max_retries: int = 3,
    backoff_seconds: float = 1.0,
) -> bytes:
    """Download the raw calendar feed.

    Args:
        url: address of the feed.
        client: optional preconfigured ``httpx.Client``; one is created
            (and closed) for this call otherwise.
        timeout: per-request timeout in seconds.
        max_retries: number of times to retry on transient errors.
        backoff_seconds: initial backoff delay for retries.

    Raises:
        FetchError: if the feed cannot be retrieved after retries.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        attempt = 0
        while True:
            try:
                response = client.get(url)
                response.raise_for_status()
                return response.content
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                attempt += 1
                status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
                transient = status in RETRY_STATUSES or isinstance(exc, (httpx.TimeoutException, httpx.NetworkError))
                if attempt <= max_retries and transient:
                    delay = backoff_seconds * (2 ** (attempt - 1))
                    logger.warning(
                        "Feed fetch transient error (status=%s), retrying in %.1fs (attempt %s/%s)",
                        status,
                        delay,
                        attempt,
                        max_retries,
                    )
                    time.sleep(delay)
                    continue
                logger.error("Feed fetch failed after %s attempts: %s", attempt, exc)
                raise FetchError(f"cannot fetch calendar feed: {exc}") from exc
    finally:
        if owns_client:
            client.close()


def parse_calendar(payload: Union[bytes, str]) -> Component:
    """Parse ``payload`` and return its first VCALENDAR component.

    Raises:
        FeedFormatError: if the payload cannot be parsed or has no calendar.
    """
    try:
        components = Calendar.from_ical(payload, multiple=True)
    except ValueError as exc:
        raise FeedFormatError(f"feed is not a calendar document: {exc}") from exc
    for component in components:
        if component.name == "VCALENDAR":
            return component
    raise FeedFormatError("feed contains no calendar")


def _first_prop(event: Component, name: str):
    prop = event.get(name)
    if isinstance(prop, list):
        prop = prop[0] if prop else None
    return prop


def _find_prop(event: Component, name: str) -> Optional[str]:
    """Return the raw text of the first ``name`` property of ``event``."""
    prop = _first_prop(event, name)
    if prop is None:
        return None
    if isinstance(prop, str):
        return str(prop)
    raw = prop.to_ical()
    return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)


def parse_timestamp(raw: str) -> datetime:
    """Parse a strict ``YYYYMMDDTHHMMSSZ`` timestamp as UTC.

    Raises:
        ValueError: on any deviation from the format.
    """
    if not _TIMESTAMP_RE.fullmatch(raw):
        raise ValueError(f"timestamp {raw!r} does not match {TIMESTAMP_FORMAT}")
    return datetime.strptime(raw, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def classify_event(event: Component, location_prefix: str = ROOM_LOCATION_PREFIX) -> Union[Booking, Skipped]:
    """Turn one VEVENT into a ``Booking``, or a ``Skipped`` with the reason."""
    start_raw = _find_prop(event, "DTSTART")
    end_raw = _find_prop(event, "DTEND")
    location = _find_prop(event, "LOCATION")
    if start_raw is None or end_raw is None or location is None:
        return Skipped("missing DTSTART, DTEND or LOCATION")

    # icalendar renders TZID=UTC values with a "Z" the feed never had.
    for name in ("DTSTART", "DTEND"):
        params = getattr(_first_prop(event, name), "params", None) or {}
        if "TZID" in params:
            return Skipped(f"{name} carries a TZID instead of a UTC timestamp")

    try:
        interval = Interval(parse_timestamp(start_raw), parse_timestamp(end_raw))
    except ValueError as exc:
        return Skipped(str(exc))

    if not location.startswith(location_prefix):
        return Skipped("location is not a room booking")

    try:
        room = RoomId.parse(location)
    except MalformedRoomLabel as exc:
        return Skipped(str(exc))

    return Booking(room, interval)


def iter_bookings(events: Iterable[Component], location_prefix: str = ROOM_LOCATION_PREFIX) -> Iterator[Booking]:
    """Yield the bookings among ``events``, logging what gets skipped."""
    skipped: Counter = Counter()
    for event in events:
        result = classify_event(event, location_prefix)
        if isinstance(result, Skipped):
            logger.debug("Skipping event %s: %s", event.get("UID", "<no uid>"), result.reason)
            skipped[result.reason] += 1
            continue
        yield result
    if skipped:
        logger.info("Skipped %s calendar events", sum(skipped.values()))


def build_directory(payload: Union[bytes, str], location_prefix: str = ROOM_LOCATION_PREFIX) -> RoomDirectory:
    """Build a ``RoomDirectory`` from a raw calendar payload."""
    calendar = parse_calendar(payload)
    return RoomDirectory.from_bookings(iter_bookings(calendar.walk("VEVENT"), location_prefix))


def ingest(
    feed_url: str,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0,
    max_retries: int = 3,
    backoff_seconds: float = 1.0,
    location_prefix: str = ROOM_LOCATION_PREFIX,
) -> RoomDirectory:
    """Fetch the feed at ``feed_url`` and return a fresh ``RoomDirectory``.

    Raises:
        FetchError: on network or HTTP failure.
        FeedFormatError: if the payload is not a calendar document.
    """
    payload = fetch_feed(
        feed_url,
        client=client,
        timeout=timeout,
        max_retries=max_retries,
        backoff_seconds=backoff_seconds,
    )
    directory = build_directory(payload, location_prefix)
    logger.info("Ingested %s bookings for %s rooms", directory.booking_count, len(directory))
    return directory
