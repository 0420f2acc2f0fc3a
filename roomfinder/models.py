"""Pydantic data models used in API responses.

These models define the structure of room information returned from the
API. They are separate from the directory types in ``roomfinder.rooms`` to
decouple the JSON representation from the internal one.
"""

from pydantic import BaseModel
from typing import Optional, List


class BusyBlock(BaseModel):
    """Represents one booking of a room."""

    start: str
    end: str


class RoomStatus(BaseModel):
    """Represents a known room and whether it is booked at a point in time."""

    roomId: str
    buildingId: str
    isBusyNow: bool
    busyBlocks: List[BusyBlock] = []


class BuildingRooms(BaseModel):
    """Rooms of one building."""

    buildingId: str
    rooms: List[RoomStatus]


class RoomsResponse(BaseModel):
    count: int
    generatedAt: str
    buildings: List[BuildingRooms]
    lastSyncedAt: Optional[str] = None
    lastError: Optional[str] = None


class FreeRoomsResponse(BaseModel):
    """Free rooms at ``at``; ``known`` is the number of rooms in the directory."""

    at: str
    known: int
    free: List[str]
    lastSyncedAt: Optional[str] = None


class ResyncResponse(BaseModel):
    count: int
    bookings: int
    lastSyncedAt: Optional[str] = None
