"""HTTP API for the room availability service.

This module defines the FastAPI application serving the room directory held
by a ``DirectorySync`` as JSON. It is the machine-facing counterpart of the
chat bot and answers the same questions.

Endpoints:
  - ``/api/rooms``: every known room, grouped by building, with its bookings.
  - ``/api/free``: rooms free at a given instant (now by default).
  - ``/api/resync``: reload the calendar feed on demand.
  - ``/healthz``: simple health check endpoint.

Reads never touch the network: they work on the directory snapshot installed
at startup or by the last successful resync. A failed resync keeps serving
the previous snapshot and surfaces the error via ``lastError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException

from .availability import free_rooms, group_by_building, is_booked
from .feed_client import IngestError
from .models import BuildingRooms, BusyBlock, FreeRoomsResponse, ResyncResponse, RoomStatus, RoomsResponse
from .rooms import as_utc
from .sync import DirectorySync

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def _iso_z(dt: Optional[datetime]) -> Optional[str]:
    """Return an RFC3339 timestamp in UTC with a Z suffix."""
    if dt is None:
        return None
    return as_utc(dt).isoformat().replace("+00:00", "Z")


def create_app(sync: DirectorySync) -> FastAPI:
    """Build the API around an initialised ``DirectorySync``."""
    app = FastAPI(title="Room Finder")

    @app.get("/api/rooms", response_model=RoomsResponse)
    def api_rooms() -> RoomsResponse:
        """Return every known room with its bookings, grouped by building."""
        directory = sync.current()
        now = _utcnow()
        buildings = group_by_building(sorted(directory.rooms()))
        return RoomsResponse(
            count=len(directory),
            generatedAt=_iso_z(now),
            buildings=[
                BuildingRooms(
                    buildingId=building,
                    rooms=[
                        RoomStatus(
                            roomId=str(room),
                            buildingId=building,
                            isBusyNow=is_booked(directory, room, now),
                            busyBlocks=[
                                BusyBlock(start=_iso_z(interval.start), end=_iso_z(interval.end))
                                for interval in directory.intervals(room)
                            ],
                        )
                        for room in rooms
                    ],
                )
                for building, rooms in buildings.items()
            ],
            lastSyncedAt=_iso_z(sync.last_synced_at),
            lastError=sync.last_error,
        )

    @app.get("/api/free", response_model=FreeRoomsResponse)
    def api_free(at: Optional[datetime] = None) -> FreeRoomsResponse:
        """Return rooms with no booking at ``at`` (defaults to now)."""
        at = as_utc(at) if at is not None else _utcnow()
        directory = sync.current()
        return FreeRoomsResponse(
            at=_iso_z(at),
            known=len(directory),
            free=[str(room) for room in sorted(free_rooms(directory, at))],
            lastSyncedAt=_iso_z(sync.last_synced_at),
        )

    @app.post("/api/resync", response_model=ResyncResponse)
    def api_resync() -> ResyncResponse:
        """Reload the calendar feed; the previous data is kept on failure."""
        try:
            directory = sync.resync()
        except IngestError as exc:
            raise HTTPException(status_code=502, detail=f"{type(exc).__name__}: {exc}")
        return ResyncResponse(
            count=len(directory),
            bookings=directory.booking_count,
            lastSyncedAt=_iso_z(sync.last_synced_at),
        )

    @app.get("/healthz")
    def healthz() -> Dict[str, Any]:
        """Health check endpoint for monitoring."""
        return {"ok": True, "time": _iso_z(_utcnow())}

    return app
