# roombook/models/notification_log.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from roombook.db.base import Base


class NotificationLog(Base):
    """
    Delivery record of a single meeting email to a single recipient.
    """

    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)

    meeting_id = Column(
        Integer,
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    recipient = Column(String(255), nullable=False)
    action = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="SENT")
    error_message = Column(Text, nullable=True)

    sent_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz=timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<NotificationLog meeting_id={self.meeting_id} recipient={self.recipient} "
            f"action={self.action} status={self.status}>"
        )
