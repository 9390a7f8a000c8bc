# roombook/schemas/availability.py
from datetime import date as date_type

from pydantic import BaseModel, Field

from roombook.schemas.meeting import TimeOfDay


class AvailabilityQuery(BaseModel):
    """
    Candidate booking to check against the meetings already on the calendar.
    """

    date: date_type = Field(..., description="Calendar date to check.", examples=["2025-11-14"])
    start_time: TimeOfDay
    end_time: TimeOfDay
    participants: list[str] = Field(
        default_factory=list,
        description="Participants whose calendars should be checked.",
    )
    exclude_meeting_id: int | None = Field(
        default=None,
        description="Meeting being edited; it never conflicts with itself.",
    )


class AvailabilityResult(BaseModel):
    """
    Room occupancy and participant conflicts for a candidate booking.
    """

    room_availability: dict[str, bool] = Field(
        ...,
        description="Every configured room mapped to True when free.",
        examples=[{"Room A": True, "Room B": False}],
    )
    participant_conflicts: dict[str, list[str]] = Field(
        ...,
        description="Queried participants mapped to titles of overlapping meetings.",
        examples=[{"alice@example.com": ["Standup"]}],
    )

    @property
    def has_participant_conflicts(self) -> bool:
        return any(self.participant_conflicts.values())
