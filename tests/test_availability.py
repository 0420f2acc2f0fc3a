"""Tests for free/known room queries."""

from datetime import datetime, timedelta

import pytest

from roomfinder.availability import all_rooms, free_rooms, group_by_building, is_booked
from roomfinder.feed_client import build_directory
from roomfinder.rooms import RoomDirectory, RoomId
from tests.conftest import calendar, utc, vevent


class TestFreeRooms:
    @pytest.mark.parametrize("at,a101_free", [
        (utc(2024, 1, 1, 9), False),
        (utc(2024, 1, 1, 10), False),
        (utc(2024, 1, 1, 9) - timedelta(seconds=1), True),
        (utc(2024, 1, 1, 10) + timedelta(seconds=1), True),
    ])
    def test_boundaries_are_inclusive(self, sample_directory, at, a101_free):
        assert (RoomId("A101") in free_rooms(sample_directory, at)) is a101_free

    def test_known_rooms_minus_booked_rooms(self, sample_directory):
        at = utc(2024, 1, 1, 14, 30)
        booked = {room for room in all_rooms(sample_directory) if is_booked(sample_directory, room, at)}
        assert booked == {RoomId("B202")}
        assert set(free_rooms(sample_directory, at)) == set(all_rooms(sample_directory)) - booked

    def test_every_room_free_outside_bookings(self, sample_directory):
        assert free_rooms(sample_directory, utc(2024, 1, 2)) == all_rooms(sample_directory)

    def test_empty_directory_knows_no_rooms(self):
        assert free_rooms(RoomDirectory(), utc(2024, 1, 1)) == []
        assert all_rooms(RoomDirectory()) == []

    def test_naive_instant_is_utc(self, sample_directory):
        assert RoomId("A101") not in free_rooms(sample_directory, datetime(2024, 1, 1, 9, 30))

    def test_feed_scenario(self):
        feed = calendar(vevent("1", "DLST-A101-extra", "20240101T090000Z", "20240101T100000Z"))
        directory = build_directory(feed)
        assert RoomId("A101") not in free_rooms(directory, utc(2024, 1, 1, 9, 30))
        assert free_rooms(directory, utc(2024, 1, 1, 10, 30)) == [RoomId("A101")]


def test_all_rooms_in_feed_order(sample_directory):
    assert all_rooms(sample_directory) == [RoomId("A101"), RoomId("B202"), RoomId("A102")]


def test_group_by_building(sample_directory):
    grouped = group_by_building(all_rooms(sample_directory))
    assert list(grouped) == ["A", "B"]
    assert grouped["A"] == [RoomId("A101"), RoomId("A102")]
    assert grouped["B"] == [RoomId("B202")]


def test_group_by_building_empty():
    assert group_by_building([]) == {}
