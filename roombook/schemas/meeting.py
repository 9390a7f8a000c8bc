# roombook/schemas/meeting.py
from datetime import date as date_type, datetime

from pydantic import BaseModel, Field


class TimeOfDay(BaseModel):
    """
    Wall-clock time within a day, at minute precision.

    Only the clock ranges are enforced here; business-hour and granularity
    rules are checked by the meeting coordinator.
    """

    hour: int = Field(..., ge=0, le=23, examples=[9])
    minute: int = Field(..., ge=0, le=59, examples=[30])


# --------------------------------------------------------------------------
# Create schema (POST /meetings)
# --------------------------------------------------------------------------

class MeetingCreate(BaseModel):
    """
    Draft of a new meeting, as submitted by the booking form.
    """

    title: str = Field(..., description="Display title of the meeting.", examples=["Sprint planning"])
    date: date_type = Field(..., description="Calendar date (YYYY-MM-DD).", examples=["2025-11-14"])
    start_time: TimeOfDay = Field(..., description="Start of the meeting (inclusive).")
    end_time: TimeOfDay = Field(..., description="End of the meeting (exclusive).")
    location: str = Field(..., description="Room to book.", examples=["Room A"])
    note: str | None = Field(default=None, description="Optional free-text note.")
    participants: list[str] = Field(
        default_factory=list,
        description="Email addresses of invited participants.",
        examples=[["alice@example.com", "bob@example.com"]],
    )
    created_by: str = Field(..., description="Email of the organizer.", examples=["carol@example.com"])


# --------------------------------------------------------------------------
# Update schema (PATCH /meetings/{id})
# --------------------------------------------------------------------------

class MeetingUpdate(BaseModel):
    """
    Sparse update of a meeting.
    Only fields present in the request body are changed.
    """

    title: str | None = Field(default=None)
    date: date_type | None = Field(default=None)
    start_time: TimeOfDay | None = Field(default=None)
    end_time: TimeOfDay | None = Field(default=None)
    location: str | None = Field(default=None)
    note: str | None = Field(default=None)
    participants: list[str] | None = Field(default=None)
    updated_by: str = Field(..., description="Email of the person editing the meeting.")

    def changed_fields(self) -> dict:
        """Fields explicitly provided by the caller, minus the actor."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "updated_by"
        }


class MeetingCancel(BaseModel):
    cancelled_by: str = Field(
        "Administrator",
        max_length=255,
        description="Email of the person cancelling the meeting.",
    )


# --------------------------------------------------------------------------
# Read schema (GET /meetings, GET /meetings/{id})
# --------------------------------------------------------------------------

class MeetingRead(BaseModel):
    """
    By-value snapshot of a stored meeting, including its participants.
    """

    id: int = Field(..., description="Identifier assigned on creation.", examples=[12])
    title: str
    date: date_type
    start_time: TimeOfDay
    end_time: TimeOfDay
    location: str
    note: str | None = None
    participants: list[str] = Field(default_factory=list)
    created_by: str
    updated_by: str | None = None
    is_cancelled: bool = False
    created_at: datetime | None = Field(
        None,
        description="Timestamp when the meeting was created.",
    )
    updated_at: datetime | None = Field(
        None,
        description="Timestamp when the meeting was last changed.",
    )


class MeetingCreated(BaseModel):
    id: int = Field(..., description="Identifier of the new meeting.", examples=[12])
    message: str = Field("Meeting created successfully.")


class MeetingMutationResult(BaseModel):
    """
    Outcome of an update or cancellation.
    """

    id: int = Field(..., examples=[12])
    changed: bool = Field(
        ...,
        description="False when the request carried nothing to change.",
    )
    message: str
