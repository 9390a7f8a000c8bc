# roombook/services/meeting_repository.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date as date_type, datetime, timezone
from typing import Any, Iterator, Protocol, Sequence

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from roombook.core.exceptions import PersistenceError
from roombook.models.meeting import Meeting, MeetingParticipant
from roombook.schemas.meeting import MeetingCreate, MeetingRead, TimeOfDay

logger = logging.getLogger(__name__)


class MeetingRepository(Protocol):
    """
    Storage contract the availability engine and meeting coordinator rely on.

    Implementations own the durable record and hand out MeetingRead copies.
    Writes are not committed until `commit()` is called.
    """

    async def find_meetings_by_date(
        self, day: date_type, include_cancelled: bool = False
    ) -> list[MeetingRead]: ...

    async def find_meeting_by_id(self, meeting_id: int) -> MeetingRead | None: ...

    async def list_meetings(self, day: date_type | None = None) -> list[MeetingRead]: ...

    async def insert_meeting(self, draft: MeetingCreate) -> int: ...

    async def update_meeting_fields(
        self, meeting_id: int, fields: dict[str, Any], updated_by: str
    ) -> int: ...

    async def set_cancelled(self, meeting_id: int, cancelled_by: str) -> int: ...

    async def find_participants(self, meeting_id: int) -> list[str]: ...

    async def replace_participants(self, meeting_id: int, identities: Sequence[str]) -> None: ...

    async def lock_date(self, day: date_type) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


# Column mapping for the sparse update of scalar meeting fields.
_TIME_COLUMNS = {
    "start_time": ("start_hour", "start_minute"),
    "end_time": ("end_hour", "end_minute"),
}
_SCALAR_COLUMNS = ("title", "date", "location", "note")


def _as_time(value: Any) -> TimeOfDay:
    if isinstance(value, TimeOfDay):
        return value
    return TimeOfDay.model_validate(value)


def meeting_to_read(meeting: Meeting) -> MeetingRead:
    """
    Convert an ORM Meeting (with participants loaded) into a detached snapshot.
    """
    return MeetingRead(
        id=meeting.id,
        title=meeting.title,
        date=meeting.date,
        start_time=TimeOfDay(hour=meeting.start_hour, minute=meeting.start_minute),
        end_time=TimeOfDay(hour=meeting.end_hour, minute=meeting.end_minute),
        location=meeting.location,
        note=meeting.note,
        participants=[p.participant_email for p in meeting.participants],
        created_by=meeting.created_by,
        updated_by=meeting.updated_by,
        is_cancelled=bool(meeting.is_cancelled),
        created_at=meeting.created_at,
        updated_at=meeting.updated_at,
    )


@contextmanager
def _persistence_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Meeting store failed during %s: %s", operation, exc)
        raise PersistenceError(f"Meeting store failed during {operation}.") from exc


class SqlAlchemyMeetingRepository:
    """
    MeetingRepository backed by an AsyncSession.

    Every read uses `populate_existing` so snapshots reflect bulk UPDATE/DELETE
    statements issued earlier in the same session.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select_meetings(self):
        return (
            select(Meeting)
            .options(selectinload(Meeting.participants))
            .execution_options(populate_existing=True)
        )

    async def find_meetings_by_date(
        self, day: date_type, include_cancelled: bool = False
    ) -> list[MeetingRead]:
        stmt = self._select_meetings().where(Meeting.date == day)
        if not include_cancelled:
            stmt = stmt.where(Meeting.is_cancelled.is_(False))
        stmt = stmt.order_by(Meeting.start_hour.asc(), Meeting.start_minute.asc(), Meeting.id.asc())

        with _persistence_errors("find_meetings_by_date"):
            result = await self.session.execute(stmt)
            meetings = result.scalars().all()

        return [meeting_to_read(m) for m in meetings]

    async def find_meeting_by_id(self, meeting_id: int) -> MeetingRead | None:
        stmt = self._select_meetings().where(Meeting.id == meeting_id)

        with _persistence_errors("find_meeting_by_id"):
            result = await self.session.execute(stmt)
            meeting = result.scalar_one_or_none()

        return meeting_to_read(meeting) if meeting is not None else None

    async def list_meetings(self, day: date_type | None = None) -> list[MeetingRead]:
        stmt = self._select_meetings()
        if day is not None:
            stmt = stmt.where(Meeting.date == day)
        stmt = stmt.order_by(
            Meeting.date.desc(),
            Meeting.start_hour.asc(),
            Meeting.start_minute.asc(),
            Meeting.id.asc(),
        )

        with _persistence_errors("list_meetings"):
            result = await self.session.execute(stmt)
            meetings = result.scalars().all()

        return [meeting_to_read(m) for m in meetings]

    async def insert_meeting(self, draft: MeetingCreate) -> int:
        meeting = Meeting(
            title=draft.title,
            date=draft.date,
            start_hour=draft.start_time.hour,
            start_minute=draft.start_time.minute,
            end_hour=draft.end_time.hour,
            end_minute=draft.end_time.minute,
            location=draft.location,
            note=draft.note,
            created_by=draft.created_by,
            is_cancelled=False,
        )

        with _persistence_errors("insert_meeting"):
            self.session.add(meeting)
            await self.session.flush()

        return meeting.id

    async def update_meeting_fields(
        self, meeting_id: int, fields: dict[str, Any], updated_by: str
    ) -> int:
        """
        Write the given scalar fields; `participants` is ignored here.

        Returns the number of affected rows (0 when the meeting does not exist).
        """
        values: dict[str, Any] = {}
        for name in _SCALAR_COLUMNS:
            if name in fields:
                values[name] = fields[name]
        for name, (hour_col, minute_col) in _TIME_COLUMNS.items():
            if name in fields:
                t = _as_time(fields[name])
                values[hour_col] = t.hour
                values[minute_col] = t.minute

        values["updated_by"] = updated_by
        values["updated_at"] = datetime.now(tz=timezone.utc)

        stmt = update(Meeting).where(Meeting.id == meeting_id).values(**values)

        with _persistence_errors("update_meeting_fields"):
            result = await self.session.execute(stmt)

        return result.rowcount or 0

    async def set_cancelled(self, meeting_id: int, cancelled_by: str) -> int:
        """
        Flip an active meeting to cancelled.

        Already-cancelled rows are not touched, so the affected count is 1
        only on the actual active -> cancelled transition.
        """
        stmt = (
            update(Meeting)
            .where(Meeting.id == meeting_id, Meeting.is_cancelled.is_(False))
            .values(
                is_cancelled=True,
                updated_by=cancelled_by,
                updated_at=datetime.now(tz=timezone.utc),
            )
        )

        with _persistence_errors("set_cancelled"):
            result = await self.session.execute(stmt)

        return result.rowcount or 0

    async def find_participants(self, meeting_id: int) -> list[str]:
        stmt = (
            select(MeetingParticipant.participant_email)
            .where(MeetingParticipant.meeting_id == meeting_id)
            .order_by(MeetingParticipant.position.asc(), MeetingParticipant.id.asc())
        )

        with _persistence_errors("find_participants"):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def replace_participants(self, meeting_id: int, identities: Sequence[str]) -> None:
        with _persistence_errors("replace_participants"):
            await self.session.execute(
                delete(MeetingParticipant).where(MeetingParticipant.meeting_id == meeting_id)
            )
            self.session.add_all(
                [
                    MeetingParticipant(
                        meeting_id=meeting_id,
                        participant_email=email,
                        position=position,
                    )
                    for position, email in enumerate(identities)
                ]
            )
            await self.session.flush()

    async def lock_date(self, day: date_type) -> None:
        """
        Serialize check-then-write for one calendar date.

        Must run before the first read of the check and before any write in
        the transaction; the lock is released by `commit()` / `rollback()`.

        - PostgreSQL: transaction-scoped advisory lock keyed on the date.
        - SQLite: `BEGIN IMMEDIATE` takes the database write lock up front.
          The driver otherwise opens its transaction lazily at the first
          INSERT/UPDATE, after the availability read. Concurrent callers
          wait on the driver's busy timeout.
        """
        dialect = self.session.bind.dialect.name

        with _persistence_errors("lock_date"):
            if dialect == "postgresql":
                await self.session.execute(select(func.pg_advisory_xact_lock(day.toordinal())))
            elif dialect == "sqlite":
                await self.session.execute(text("BEGIN IMMEDIATE"))

    async def commit(self) -> None:
        with _persistence_errors("commit"):
            await self.session.commit()

    async def rollback(self) -> None:
        with _persistence_errors("rollback"):
            await self.session.rollback()
