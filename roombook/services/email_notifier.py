# roombook/services/email_notifier.py
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from roombook.core.config import get_settings
from roombook.schemas.meeting import MeetingRead
from roombook.schemas.notification import NotificationAction
from roombook.services.time_interval import format_time_of_day

logger = logging.getLogger(__name__)


def build_meeting_email_subject(
    meeting: MeetingRead,
    action: NotificationAction,
    is_organizer: bool = False,
) -> str:
    if action == NotificationAction.CREATED:
        prefix = "Meeting Created" if is_organizer else "Meeting Invitation"
    elif action == NotificationAction.UPDATED:
        prefix = "Meeting Updated"
    else:
        prefix = "Meeting Cancelled"
    return f"{prefix}: {meeting.title}"


def _action_message(action: NotificationAction, actor: str | None) -> str:
    by = actor or "the organizer"
    if action == NotificationAction.CREATED:
        return "You have been invited to a new meeting."
    if action == NotificationAction.UPDATED:
        return f"A meeting you're participating in has been updated by {by}."
    return f"A meeting you were scheduled to attend has been cancelled by {by}."


def build_meeting_email_body(
    meeting: MeetingRead,
    action: NotificationAction,
    actor: str | None = None,
) -> str:
    """
    Build the plain-text body of a meeting notification.
    """
    lines: list[str] = []

    lines.append(_action_message(action, actor))
    lines.append("")
    lines.append(f"Title:     {meeting.title}")
    lines.append(f"Date:      {meeting.date.strftime('%A, %B')} {meeting.date.day}, {meeting.date.year}")
    lines.append(
        f"Time:      {format_time_of_day(meeting.start_time)} - {format_time_of_day(meeting.end_time)}"
    )
    lines.append(f"Location:  {meeting.location}")
    if meeting.note:
        lines.append(f"Note:      {meeting.note}")
    lines.append(f"Organizer: {meeting.created_by}")
    if meeting.participants:
        lines.append(f"Participants: {', '.join(meeting.participants)}")

    if action == NotificationAction.CANCELLED:
        lines.append("")
        lines.append("This meeting has been cancelled.")

    lines.append("")
    lines.append("Regards,")
    lines.append(get_settings().APP_NAME)

    return "\n".join(lines)


def send_meeting_email(
    to: str,
    subject: str,
    meeting: MeetingRead,
    action: NotificationAction,
    actor: str | None = None,
) -> bool:
    """
    Send one meeting notification to one recipient via SMTP.

    Returns
    -------
    bool
        True if the message was handed to the SMTP server.
        False if email sending is misconfigured or fails.
    """
    settings = get_settings()

    if not settings.SMTP_HOST or not settings.SMTP_FROM_ADDRESS:
        logger.warning("SMTP not configured; skipping %s email to %s", action.value, to)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM_ADDRESS
    msg["To"] = to
    msg.set_content(build_meeting_email_body(meeting, action, actor))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send %s email for meeting %s to %s", action.value, meeting.id, to)
        return False
