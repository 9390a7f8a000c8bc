# roombook/schemas/notification.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationAction(str, Enum):
    """
    Meeting lifecycle events that trigger an email.
    """

    CREATED = "created"
    UPDATED = "updated"
    CANCELLED = "cancelled"


class NotificationStatus(str, Enum):
    SENT = "SENT"
    FAILED = "FAILED"


class NotificationOutcome(BaseModel):
    recipient: str
    status: NotificationStatus
    error_message: str | None = None


class NotificationReport(BaseModel):
    """
    Per-recipient result of one notification fan-out.
    """

    meeting_id: int
    action: NotificationAction
    outcomes: list[NotificationOutcome] = Field(default_factory=list)

    @property
    def sent_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == NotificationStatus.SENT)

    @property
    def failed_recipients(self) -> list[str]:
        return [o.recipient for o in self.outcomes if o.status == NotificationStatus.FAILED]


class NotificationLogRead(BaseModel):
    """
    Public representation of a NotificationLog entry.
    """

    id: int = Field(..., examples=[1])
    meeting_id: int = Field(..., examples=[12])
    recipient: str = Field(..., examples=["alice@example.com"])
    action: NotificationAction
    status: NotificationStatus
    error_message: str | None = None
    sent_at: datetime

    class Config:
        from_attributes = True
