# tests/test_booking_concurrency.py
import asyncio
from datetime import date

import pytest

from roombook.core.exceptions import RoomUnavailableError
from roombook.db.session import AsyncSessionLocal
from roombook.schemas.meeting import MeetingCreate, TimeOfDay
from roombook.services.meeting_coordinator import MeetingCoordinator
from roombook.services.meeting_repository import SqlAlchemyMeetingRepository

MEETING_DAY = date(2025, 11, 14)
ROOMS = ["Room A", "Room B"]


def _draft(title: str, location: str = "Room A", start: int = 9, end: int = 10) -> MeetingCreate:
    return MeetingCreate(
        title=title,
        date=MEETING_DAY,
        start_time=TimeOfDay(hour=start, minute=0),
        end_time=TimeOfDay(hour=end, minute=0),
        location=location,
        participants=["alice@example.com"],
        created_by="carol@example.com",
    )


async def _create_in_own_session(draft: MeetingCreate) -> int:
    async with AsyncSessionLocal() as session:
        coordinator = MeetingCoordinator(SqlAlchemyMeetingRepository(session), ROOMS)
        return await coordinator.create(draft)


async def _update_in_own_session(meeting_id: int, fields: dict) -> bool:
    async with AsyncSessionLocal() as session:
        coordinator = MeetingCoordinator(SqlAlchemyMeetingRepository(session), ROOMS)
        return await coordinator.update(meeting_id, fields, "dave@example.com")


async def _active_meetings() -> list:
    async with AsyncSessionLocal() as session:
        return await SqlAlchemyMeetingRepository(session).find_meetings_by_date(MEETING_DAY)


@pytest.mark.asyncio
async def test_simultaneous_creates_for_the_same_slot_book_the_room_once():
    results = await asyncio.gather(
        _create_in_own_session(_draft("Planning")),
        _create_in_own_session(_draft("Retro")),
        return_exceptions=True,
    )

    created = [r for r in results if isinstance(r, int)]
    rejected = [r for r in results if isinstance(r, RoomUnavailableError)]
    assert len(created) == 1, results
    assert len(rejected) == 1, results

    active = await _active_meetings()
    assert [m.id for m in active] == created


@pytest.mark.asyncio
async def test_simultaneous_creates_in_different_rooms_both_succeed():
    results = await asyncio.gather(
        _create_in_own_session(_draft("Planning", location="Room A")),
        _create_in_own_session(_draft("Retro", location="Room B")),
    )

    assert len(set(results)) == 2
    assert {m.location for m in await _active_meetings()} == {"Room A", "Room B"}


@pytest.mark.asyncio
async def test_simultaneous_moves_into_the_same_slot_book_the_room_once():
    first = await _create_in_own_session(_draft("Planning", location="Room A"))
    second = await _create_in_own_session(_draft("Retro", location="Room B"))
    target = {
        "location": "Room A",
        "start_time": TimeOfDay(hour=14, minute=0),
        "end_time": TimeOfDay(hour=15, minute=0),
    }

    results = await asyncio.gather(
        _update_in_own_session(first, dict(target)),
        _update_in_own_session(second, dict(target)),
        return_exceptions=True,
    )

    assert sorted(type(r).__name__ for r in results) == ["RoomUnavailableError", "bool"]
    afternoon = [m for m in await _active_meetings() if m.start_time.hour == 14]
    assert len(afternoon) == 1
