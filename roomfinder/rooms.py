"""Room identifiers, booking intervals and the immutable room directory.

These types are the data model shared by every other module. A
``RoomDirectory`` is built once per ingestion of the calendar feed and is
never mutated afterwards, so it can be handed to concurrent readers without
any locking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

# A building letter followed by three digits, or the short ``F<digit>`` form.
_ROOM_CODE_RE = re.compile(r"[A-F][0-9]{3}|F[0-9]")


class RoomFinderError(Exception):
    """Base class for all errors raised by this package."""


class MalformedRoomLabel(RoomFinderError):
    """Raised when a location label does not contain a room code."""

    def __init__(self, label: str) -> None:
        super().__init__(f"no room code found in location label {label!r}")
        self.label = label


@dataclass(frozen=True, order=True)
class RoomId:
    """Canonical room code such as ``A101`` or ``F2``."""

    code: str

    @classmethod
    def parse(cls, raw: str) -> "RoomId":
        """Extract the first room code found in ``raw``.

        Anything around the code is discarded, so ``"DLST-A101-extra"``
        yields ``A101``.

        Raises:
            MalformedRoomLabel: if ``raw`` contains no room code.
        """
        match = _ROOM_CODE_RE.search(raw)
        if match is None:
            raise MalformedRoomLabel(raw)
        return cls(match.group(0))

    def building(self) -> str:
        """Return the building letter, i.e. the first character of the code."""
        return self.code[0]

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class Interval:
    """A booking between two UTC instants, both bounds inclusive."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"interval ends before it starts: {self.start} > {self.end}")

    def contains(self, at: datetime) -> bool:
        return self.start <= at <= self.end


def as_utc(at: datetime) -> datetime:
    """Return ``at`` as an aware UTC datetime; naive values are taken as UTC."""
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at.astimezone(timezone.utc)


def group_into_lists(pairs: Iterable[Tuple[K, V]]) -> Dict[K, List[V]]:
    """Group ``(key, value)`` pairs into a dict of lists.

    Keys keep the order of their first appearance and values keep their
    input order within each list.
    """
    grouped: Dict[K, List[V]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return grouped


class RoomDirectory:
    """Immutable mapping from each booked room to its intervals.

    Rooms without any booking are simply absent. Iteration follows the
    order in which rooms first appeared in the feed.
    """

    __slots__ = ("_rooms",)

    def __init__(self, rooms: Optional[Mapping[RoomId, Sequence[Interval]]] = None) -> None:
        frozen = {room: tuple(intervals) for room, intervals in (rooms or {}).items() if intervals}
        self._rooms: Mapping[RoomId, Tuple[Interval, ...]] = MappingProxyType(frozen)

    @classmethod
    def from_bookings(cls, bookings: Iterable[Tuple[RoomId, Interval]]) -> "RoomDirectory":
        return cls(group_into_lists(bookings))

    def rooms(self) -> List[RoomId]:
        return list(self._rooms)

    def intervals(self, room: RoomId) -> Tuple[Interval, ...]:
        """Return the bookings of ``room``, or an empty tuple if it is unknown."""
        return self._rooms.get(room, ())

    def items(self) -> Iterator[Tuple[RoomId, Tuple[Interval, ...]]]:
        return iter(self._rooms.items())

    @property
    def booking_count(self) -> int:
        return sum(len(intervals) for intervals in self._rooms.values())

    def __contains__(self, room: object) -> bool:
        return room in self._rooms

    def __iter__(self) -> Iterator[RoomId]:
        return iter(self._rooms)

    def __len__(self) -> int:
        return len(self._rooms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoomDirectory):
            return NotImplemented
        return dict(self._rooms) == dict(other._rooms)

    def __hash__(self) -> int:
        return hash(frozenset(self._rooms.items()))

    def __repr__(self) -> str:
        return f"RoomDirectory(rooms={len(self)}, bookings={self.booking_count})"
