# roombook/services/availability.py
from __future__ import annotations

from datetime import date as date_type
from typing import Iterable, Sequence

from roombook.schemas.availability import AvailabilityResult
from roombook.schemas.meeting import TimeOfDay
from roombook.services.meeting_repository import MeetingRepository
from roombook.services.time_interval import overlaps, to_minutes


class AvailabilityEngine:
    """
    Computes room occupancy and participant conflicts for a candidate window.

    Algorithm
    ---------
    1) Read all non-cancelled meetings on the date (one repository call).
    2) Drop the meeting being edited, if any.
    3) Start with every configured room free and every queried participant
       conflict-free.
    4) For every remaining meeting overlapping `[start, end)`:
        - mark its room busy (a busy room never becomes free again),
        - append its title to each queried participant attending it.

    The window is taken as-is; business-hour rules belong to the caller.
    Nothing is cached between calls.
    """

    def __init__(self, repository: MeetingRepository, rooms: Sequence[str]):
        self.repository = repository
        self.rooms = list(rooms)

    async def check_availability(
        self,
        day: date_type,
        start_time: TimeOfDay,
        end_time: TimeOfDay,
        participants: Iterable[str] = (),
        exclude_meeting_id: int | None = None,
    ) -> AvailabilityResult:
        meetings = await self.repository.find_meetings_by_date(day, include_cancelled=False)

        if exclude_meeting_id is not None:
            meetings = [m for m in meetings if m.id != exclude_meeting_id]

        room_availability: dict[str, bool] = {room: True for room in self.rooms}
        participant_conflicts: dict[str, list[str]] = {p: [] for p in participants}

        start_minutes = to_minutes(start_time)
        end_minutes = to_minutes(end_time)

        for meeting in meetings:
            if not overlaps(
                start_minutes,
                end_minutes,
                to_minutes(meeting.start_time),
                to_minutes(meeting.end_time),
            ):
                continue

            if meeting.location in room_availability:
                room_availability[meeting.location] = False

            if participant_conflicts:
                attendees = set(meeting.participants)
                for participant, titles in participant_conflicts.items():
                    if participant in attendees:
                        titles.append(meeting.title)

        return AvailabilityResult(
            room_availability=room_availability,
            participant_conflicts=participant_conflicts,
        )

    async def is_room_available(
        self,
        day: date_type,
        start_time: TimeOfDay,
        end_time: TimeOfDay,
        room: str,
        exclude_meeting_id: int | None = None,
    ) -> bool:
        result = await self.check_availability(
            day,
            start_time,
            end_time,
            exclude_meeting_id=exclude_meeting_id,
        )
        return result.room_availability.get(room, False)
