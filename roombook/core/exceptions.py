# roombook/core/exceptions.py
"""
Domain-specific exception hierarchy for the RoomBook service.
"""
from __future__ import annotations

from datetime import date as date_type
from typing import Iterable

from roombook.schemas.errors import FieldError


class RoomBookError(Exception):
    """Base class for all application-level errors."""


class ValidationError(RoomBookError):
    """
    Raised when meeting input is malformed or breaks a booking rule.

    Carries every violation found, not just the first one, so callers can
    display them together.
    """

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors = list(errors)
        message = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(message or "Invalid meeting input.")


class RoomUnavailableError(ValidationError):
    """Raised when a write would double-book a room."""

    def __init__(self, room: str, day: date_type) -> None:
        self.room = room
        self.day = day
        super().__init__(
            [
                FieldError(
                    field="location",
                    message=f"{room} is already booked for that time on {day.isoformat()}.",
                )
            ]
        )


class NotFoundError(RoomBookError, LookupError):
    """Raised when a referenced meeting does not exist."""

    def __init__(self, meeting_id: int) -> None:
        self.meeting_id = meeting_id
        super().__init__(f"Meeting with id {meeting_id} not found.")


class PersistenceError(RoomBookError):
    """Raised when the meeting store cannot complete a read or write."""


class NotificationFailure(RoomBookError):
    """Raised when a single notification could not be delivered."""

    def __init__(self, recipient: str, reason: str) -> None:
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Notification to {recipient} failed: {reason}")
