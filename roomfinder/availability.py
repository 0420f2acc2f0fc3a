"""Point-in-time availability queries over a room directory."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List

from .rooms import RoomDirectory, RoomId, as_utc, group_into_lists


def is_booked(directory: RoomDirectory, room: RoomId, at: datetime) -> bool:
    at = as_utc(at)
    return any(interval.contains(at) for interval in directory.intervals(room))


def free_rooms(directory: RoomDirectory, at: datetime) -> List[RoomId]:
    """Return the known rooms with no booking containing ``at``.

    Only rooms present in ``directory`` are considered, so an empty
    directory yields an empty list even though nothing is booked. Callers
    that need to tell "no rooms known" from "no rooms free" should check
    ``all_rooms`` as well. Naive ``at`` values are taken as UTC.
    """
    at = as_utc(at)
    return [
        room
        for room, intervals in directory.items()
        if not any(interval.contains(at) for interval in intervals)
    ]


def all_rooms(directory: RoomDirectory) -> List[RoomId]:
    """Return every room with at least one booking, in feed order."""
    return directory.rooms()


def group_by_building(rooms: Iterable[RoomId]) -> Dict[str, List[RoomId]]:
    """Group rooms by building letter, keeping input order within groups."""
    return group_into_lists((room.building(), room) for room in rooms)
