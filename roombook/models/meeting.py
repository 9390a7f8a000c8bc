# roombook/models/meeting.py
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from roombook.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Meeting(Base):
    """
    A booking of one room for a half-open time window on a single date.

    Cancellation is a soft delete: the row stays for history with
    `is_cancelled = True` and is ignored by availability checks.
    """

    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)

    start_hour = Column(Integer, nullable=False)
    start_minute = Column(Integer, nullable=False)
    end_hour = Column(Integer, nullable=False)
    end_minute = Column(Integer, nullable=False)

    location = Column(String(255), nullable=False)
    note = Column(Text, nullable=True)

    created_by = Column(String(255), nullable=False)
    updated_by = Column(String(255), nullable=True)

    is_cancelled = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    participants = relationship(
        "MeetingParticipant",
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="MeetingParticipant.position",
    )

    def __repr__(self) -> str:
        return (
            f"<Meeting id={self.id} date={self.date} location={self.location} "
            f"cancelled={self.is_cancelled}>"
        )


class MeetingParticipant(Base):
    """
    Membership of one participant (by email) in a meeting.
    """

    __tablename__ = "meeting_participants"

    id = Column(Integer, primary_key=True)

    meeting_id = Column(
        Integer,
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    participant_email = Column(String(255), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    meeting = relationship("Meeting", back_populates="participants")

    __table_args__ = (
        UniqueConstraint(
            "meeting_id",
            "participant_email",
            name="uq_meeting_participants_meeting_email",
        ),
    )

    def __repr__(self) -> str:
        return f"<MeetingParticipant meeting_id={self.meeting_id} email={self.participant_email}>"
