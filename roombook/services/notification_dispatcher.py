# roombook/services/notification_dispatcher.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from roombook.core.exceptions import NotificationFailure
from roombook.schemas.meeting import MeetingRead
from roombook.schemas.notification import (
    NotificationAction,
    NotificationOutcome,
    NotificationReport,
    NotificationStatus,
)
from roombook.services.email_notifier import build_meeting_email_subject, send_meeting_email

logger = logging.getLogger(__name__)

SendFn = Callable[[str, str, MeetingRead, NotificationAction, "str | None"], bool]
RecorderFn = Callable[[NotificationReport], Awaitable[None]]


def meeting_recipients(meeting: MeetingRead) -> list[str]:
    """
    Every participant, then the organizer if not already a participant.
    """
    recipients = list(dict.fromkeys(meeting.participants))
    if meeting.created_by and meeting.created_by not in recipients:
        recipients.append(meeting.created_by)
    return recipients


class NotificationDispatcher:
    """
    Best-effort fan-out of one meeting event to all of its recipients.

    - One send per recipient, never batched.
    - Sends run sequentially in a worker thread so SMTP does not block the loop.
    - A failed or raising send is recorded for that recipient only; the loop
      always continues and nothing is raised to the caller.
    """

    def __init__(
        self,
        send: SendFn = send_meeting_email,
        recorder: RecorderFn | None = None,
    ):
        self.send = send
        self.recorder = recorder

    async def _send_one(
        self,
        recipient: str,
        meeting: MeetingRead,
        action: NotificationAction,
        actor: str | None,
    ) -> NotificationOutcome:
        subject = build_meeting_email_subject(
            meeting,
            action,
            is_organizer=recipient == meeting.created_by and recipient not in meeting.participants,
        )
        try:
            delivered = await asyncio.to_thread(self.send, recipient, subject, meeting, action, actor)
            if not delivered:
                raise NotificationFailure(recipient, "delivery was not accepted")
        except Exception as exc:
            logger.warning(
                "Could not send %s notification for meeting %s to %s: %s",
                action.value,
                meeting.id,
                recipient,
                exc,
            )
            return NotificationOutcome(
                recipient=recipient,
                status=NotificationStatus.FAILED,
                error_message=str(exc),
            )

        return NotificationOutcome(recipient=recipient, status=NotificationStatus.SENT)

    async def dispatch(
        self,
        meeting: MeetingRead,
        action: NotificationAction,
        actor: str | None = None,
    ) -> NotificationReport:
        report = NotificationReport(meeting_id=meeting.id, action=action)

        for recipient in meeting_recipients(meeting):
            report.outcomes.append(await self._send_one(recipient, meeting, action, actor))

        logger.info(
            "Meeting %s %s: %d/%d notifications sent",
            meeting.id,
            action.value,
            report.sent_count,
            len(report.outcomes),
        )

        if self.recorder is not None and report.outcomes:
            try:
                await self.recorder(report)
            except Exception:
                logger.exception("Could not record notification outcomes for meeting %s", meeting.id)

        return report
