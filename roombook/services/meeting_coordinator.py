# roombook/services/meeting_coordinator.py
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Any, Callable, Sequence

from email_validator import EmailNotValidError, validate_email

from roombook.core.exceptions import (
    NotFoundError,
    PersistenceError,
    RoomUnavailableError,
    ValidationError,
)
from roombook.schemas.errors import FieldError
from roombook.schemas.meeting import MeetingCreate, MeetingRead
from roombook.schemas.notification import NotificationAction, NotificationReport
from roombook.services.availability import AvailabilityEngine
from roombook.services.meeting_repository import MeetingRepository
from roombook.services.notification_dispatcher import NotificationDispatcher
from roombook.services import time_interval

logger = logging.getLogger(__name__)

NOTE_MAX_LENGTH = 2000
# Matches the String(255) columns holding titles and identities.
TEXT_MAX_LENGTH = 255

# Fields that move a meeting in time or space and therefore need a room re-check.
_PLACEMENT_FIELDS = {"date", "start_time", "end_time", "location"}
UPDATABLE_FIELDS = {"title", "date", "start_time", "end_time", "location", "note", "participants"}
_REQUIRED_FIELDS = ("title", "date", "start_time", "end_time", "location", "participants")

ScheduleFn = Callable[..., Any]


def _email_error(value: str) -> str | None:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        return str(exc)
    return None


def validate_meeting_draft(
    draft: MeetingCreate,
    rooms: Sequence[str],
    *,
    note_max_length: int = NOTE_MAX_LENGTH,
    **window_rules: int,
) -> list[FieldError]:
    """
    Check a complete meeting against every booking rule.

    All violations are returned together; an empty list means the draft
    may be written. `window_rules` are forwarded to
    `time_interval.validate_meeting_window` (business-hour bounds, slot size).
    """
    errors: list[FieldError] = []

    if not draft.title or not draft.title.strip():
        errors.append(FieldError(field="title", message="Title is required."))
    elif len(draft.title) > TEXT_MAX_LENGTH:
        errors.append(
            FieldError(field="title", message=f"Title must be at most {TEXT_MAX_LENGTH} characters.")
        )
    if draft.title and ("\r" in draft.title or "\n" in draft.title):
        # the title becomes the email subject header
        errors.append(FieldError(field="title", message="Title must be a single line."))

    if not draft.created_by or not draft.created_by.strip():
        errors.append(FieldError(field="created_by", message="Organizer is required."))
    elif len(draft.created_by) > TEXT_MAX_LENGTH:
        errors.append(
            FieldError(field="created_by", message=f"Organizer must be at most {TEXT_MAX_LENGTH} characters.")
        )

    if draft.location not in rooms:
        errors.append(
            FieldError(
                field="location",
                message=f"Unsupported room '{draft.location}'. Choose one of: {', '.join(rooms)}.",
            )
        )

    if draft.note is not None and len(draft.note) > note_max_length:
        errors.append(
            FieldError(field="note", message=f"Note must be at most {note_max_length} characters.")
        )

    seen: set[str] = set()
    for participant in draft.participants:
        reason = _email_error(participant)
        if reason is not None:
            errors.append(
                FieldError(
                    field="participants",
                    message=f"'{participant}' is not a valid email address: {reason}",
                )
            )
        elif len(participant) > TEXT_MAX_LENGTH:
            errors.append(
                FieldError(
                    field="participants",
                    message=f"'{participant}' is longer than {TEXT_MAX_LENGTH} characters.",
                )
            )
        if participant in seen:
            errors.append(
                FieldError(field="participants", message=f"'{participant}' is listed more than once.")
            )
        seen.add(participant)

    errors += time_interval.validate_meeting_window(draft.start_time, draft.end_time, **window_rules)
    return errors


class MeetingCoordinator:
    """
    Orchestrates create / update / cancel of meetings.

    Responsibilities
    ----------------
    - Validate input completely before anything is written.
    - Re-check room occupancy inside the write transaction when
      `enforce_room_availability` is on (rejects double-bookings).
    - Persist through the repository and commit; roll back and re-raise
      on persistence failures.
    - Fan out notifications after the commit. With `schedule` (e.g.
      `BackgroundTasks.add_task`) the fan-out runs after the caller got its
      answer; without it the fan-out is awaited inline.
    """

    def __init__(
        self,
        repository: MeetingRepository,
        rooms: Sequence[str],
        dispatcher: NotificationDispatcher | None = None,
        *,
        enforce_room_availability: bool = True,
        schedule: ScheduleFn | None = None,
        note_max_length: int = NOTE_MAX_LENGTH,
        day_start_hour: int = time_interval.BUSINESS_DAY_START_HOUR,
        last_start_hour: int = time_interval.LAST_START_HOUR,
        day_end_hour: int = time_interval.BUSINESS_DAY_END_HOUR,
        step: int = time_interval.SLOT_MINUTES,
    ):
        self.repository = repository
        self.rooms = list(rooms)
        self.dispatcher = dispatcher
        self.enforce_room_availability = enforce_room_availability
        self.schedule = schedule
        self.note_max_length = note_max_length
        self.window_rules = {
            "day_start_hour": day_start_hour,
            "last_start_hour": last_start_hour,
            "day_end_hour": day_end_hour,
            "step": step,
        }
        self.availability = AvailabilityEngine(repository, self.rooms)
        self.last_notification_report: NotificationReport | None = None

    def validate(self, draft: MeetingCreate) -> list[FieldError]:
        return validate_meeting_draft(
            draft,
            self.rooms,
            note_max_length=self.note_max_length,
            **self.window_rules,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, meeting_id: int) -> MeetingRead:
        meeting = await self.repository.find_meeting_by_id(meeting_id)
        if meeting is None:
            raise NotFoundError(meeting_id)
        return meeting

    async def list_meetings(self, day: date_type | None = None) -> list[MeetingRead]:
        return await self.repository.list_meetings(day)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, draft: MeetingCreate) -> int:
        errors = self.validate(draft)
        if errors:
            raise ValidationError(errors)

        try:
            await self._ensure_room_free(draft, exclude_meeting_id=None)
            meeting_id = await self.repository.insert_meeting(draft)
            await self.repository.replace_participants(meeting_id, draft.participants)
            snapshot = await self.repository.find_meeting_by_id(meeting_id)
            await self.repository.commit()
        except (PersistenceError, RoomUnavailableError):
            await self.repository.rollback()
            raise

        logger.info(
            "Meeting %s created by %s: %s on %s in %s",
            meeting_id,
            draft.created_by,
            draft.title,
            draft.date.isoformat(),
            draft.location,
        )

        if snapshot is not None:
            await self._notify(snapshot, NotificationAction.CREATED, draft.created_by)
        return meeting_id

    async def update(self, meeting_id: int, fields: dict[str, Any], updated_by: str) -> bool:
        """
        Apply a sparse update.

        Returns False, without touching storage, when `fields` is empty.
        `participants`, when present, replaces the whole membership set.
        """
        fields = {name: value for name, value in fields.items() if name in UPDATABLE_FIELDS}
        if not fields:
            return False

        current = await self.get(meeting_id)

        errors: list[FieldError] = []
        if current.is_cancelled:
            errors.append(FieldError(field="id", message="Cancelled meetings cannot be edited."))
        if not updated_by or not updated_by.strip():
            errors.append(FieldError(field="updated_by", message="Editor is required."))
        elif len(updated_by) > TEXT_MAX_LENGTH:
            errors.append(
                FieldError(field="updated_by", message=f"Editor must be at most {TEXT_MAX_LENGTH} characters.")
            )
        for name in _REQUIRED_FIELDS:
            if name in fields and fields[name] is None:
                errors.append(FieldError(field=name, message=f"{name} cannot be cleared."))
                del fields[name]

        merged = MeetingCreate(
            title=fields.get("title", current.title),
            date=fields.get("date", current.date),
            start_time=fields.get("start_time", current.start_time),
            end_time=fields.get("end_time", current.end_time),
            location=fields.get("location", current.location),
            note=fields.get("note", current.note),
            participants=fields.get("participants", current.participants),
            created_by=current.created_by,
        )
        errors += self.validate(merged)
        if errors:
            raise ValidationError(errors)

        try:
            if _PLACEMENT_FIELDS & fields.keys():
                await self._ensure_room_free(merged, exclude_meeting_id=meeting_id)

            affected = await self.repository.update_meeting_fields(meeting_id, fields, updated_by)
            if affected == 0:
                await self.repository.rollback()
                return False

            if "participants" in fields:
                await self.repository.replace_participants(meeting_id, merged.participants)

            snapshot = await self.repository.find_meeting_by_id(meeting_id)
            await self.repository.commit()
        except (PersistenceError, RoomUnavailableError):
            await self.repository.rollback()
            raise

        logger.info("Meeting %s updated by %s: %s", meeting_id, updated_by, sorted(fields))

        if snapshot is not None:
            await self._notify(snapshot, NotificationAction.UPDATED, updated_by)
        return True

    async def cancel(self, meeting_id: int, cancelled_by: str) -> bool:
        """
        Soft-cancel a meeting.

        Cancelling an already-cancelled meeting succeeds without notifying
        anyone again.
        """
        await self.get(meeting_id)

        try:
            affected = await self.repository.set_cancelled(meeting_id, cancelled_by)
            snapshot = await self.repository.find_meeting_by_id(meeting_id)
            await self.repository.commit()
        except PersistenceError:
            await self.repository.rollback()
            raise

        if affected == 0:
            logger.info("Meeting %s was already cancelled", meeting_id)
            return True

        logger.info("Meeting %s cancelled by %s", meeting_id, cancelled_by)

        if snapshot is not None:
            await self._notify(snapshot, NotificationAction.CANCELLED, cancelled_by)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ensure_room_free(self, draft: MeetingCreate, exclude_meeting_id: int | None) -> None:
        if not self.enforce_room_availability:
            return

        await self.repository.lock_date(draft.date)
        available = await self.availability.is_room_available(
            draft.date,
            draft.start_time,
            draft.end_time,
            draft.location,
            exclude_meeting_id=exclude_meeting_id,
        )
        if not available:
            raise RoomUnavailableError(draft.location, draft.date)

    async def _notify(self, meeting: MeetingRead, action: NotificationAction, actor: str) -> None:
        if self.dispatcher is None:
            return

        if self.schedule is not None:
            self.schedule(self.dispatcher.dispatch, meeting, action, actor)
            return

        self.last_notification_report = await self.dispatcher.dispatch(meeting, action, actor)
