# tests/conftest.py
import os
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

# Point the app at a throwaway SQLite database before any roombook import
# reads the (cached) settings.
TEST_DB_PATH = Path(tempfile.gettempdir()) / "roombook_test.db"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["APP_ENV"] = "test"
os.environ["ROOMS"] = "Room A,Room B"
os.environ["NOTIFICATIONS_ENABLED"] = "true"
os.environ["ENFORCE_ROOM_AVAILABILITY"] = "true"
os.environ.pop("API_KEY", None)
os.environ.pop("READONLY_API_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from roombook.api.dependencies.services import get_notification_dispatcher  # noqa: E402
from roombook.core.exceptions import PersistenceError  # noqa: E402
from roombook.db.session import AsyncSessionLocal, reset_schema_sync  # noqa: E402
from roombook.main import create_app  # noqa: E402
from roombook.schemas.meeting import MeetingCreate, MeetingRead, TimeOfDay  # noqa: E402
from roombook.services.notification_dispatcher import NotificationDispatcher  # noqa: E402
from roombook.services.notification_log import record_notification_report  # noqa: E402

MEETING_DAY = date(2025, 11, 14)


class InMemoryMeetingRepository:
    """
    Dict-backed stand-in for the SQL repository.

    Hands out copies like the real one, counts calls, and can be told to
    fail specific operations with a PersistenceError.
    """

    def __init__(self):
        self.meetings: dict[int, MeetingRead] = {}
        self._next_id = 1
        self.calls: list[str] = []
        self.fail_on: set[str] = set()
        self.commits = 0
        self.rollbacks = 0
        self.locked_dates: list[date] = []

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise PersistenceError(f"{operation} failed")

    def add(
        self,
        title: str,
        start: tuple[int, int],
        end: tuple[int, int],
        location: str = "Room A",
        participants: tuple[str, ...] = (),
        day: date = MEETING_DAY,
        created_by: str = "organizer@example.com",
        is_cancelled: bool = False,
    ) -> MeetingRead:
        """Seed a stored meeting directly, bypassing the coordinator."""
        now = datetime.now(tz=timezone.utc)
        meeting = MeetingRead(
            id=self._next_id,
            title=title,
            date=day,
            start_time=TimeOfDay(hour=start[0], minute=start[1]),
            end_time=TimeOfDay(hour=end[0], minute=end[1]),
            location=location,
            participants=list(participants),
            created_by=created_by,
            is_cancelled=is_cancelled,
            created_at=now,
            updated_at=now,
        )
        self.meetings[meeting.id] = meeting
        self._next_id += 1
        return meeting

    async def find_meetings_by_date(self, day, include_cancelled=False):
        self._record("find_meetings_by_date")
        return [
            m.model_copy(deep=True)
            for m in self.meetings.values()
            if m.date == day and (include_cancelled or not m.is_cancelled)
        ]

    async def find_meeting_by_id(self, meeting_id):
        self._record("find_meeting_by_id")
        meeting = self.meetings.get(meeting_id)
        return meeting.model_copy(deep=True) if meeting else None

    async def list_meetings(self, day=None):
        self._record("list_meetings")
        return [
            m.model_copy(deep=True)
            for m in self.meetings.values()
            if day is None or m.date == day
        ]

    async def insert_meeting(self, draft: MeetingCreate) -> int:
        self._record("insert_meeting")
        meeting = self.add(
            title=draft.title,
            start=(draft.start_time.hour, draft.start_time.minute),
            end=(draft.end_time.hour, draft.end_time.minute),
            location=draft.location,
            day=draft.date,
            created_by=draft.created_by,
        )
        meeting.note = draft.note
        return meeting.id

    async def update_meeting_fields(self, meeting_id, fields, updated_by):
        self._record("update_meeting_fields")
        meeting = self.meetings.get(meeting_id)
        if meeting is None:
            return 0
        changes = {k: v for k, v in fields.items() if k != "participants"}
        changes["updated_by"] = updated_by
        changes["updated_at"] = datetime.now(tz=timezone.utc)
        self.meetings[meeting_id] = meeting.model_copy(update=changes)
        return 1

    async def set_cancelled(self, meeting_id, cancelled_by):
        self._record("set_cancelled")
        meeting = self.meetings.get(meeting_id)
        if meeting is None or meeting.is_cancelled:
            return 0
        self.meetings[meeting_id] = meeting.model_copy(
            update={"is_cancelled": True, "updated_by": cancelled_by}
        )
        return 1

    async def find_participants(self, meeting_id):
        self._record("find_participants")
        return list(self.meetings[meeting_id].participants)

    async def replace_participants(self, meeting_id, identities):
        self._record("replace_participants")
        self.meetings[meeting_id].participants = list(identities)

    async def lock_date(self, day):
        self._record("lock_date")
        self.locked_dates.append(day)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class RecordingSender:
    """
    Replacement for `send_meeting_email` that remembers every call.

    Recipients listed in `failing` get a False return, those in `raising`
    make the call raise.
    """

    def __init__(self, failing=(), raising=()):
        self.sent: list[dict] = []
        self.failing = set(failing)
        self.raising = set(raising)

    def __call__(self, to, subject, meeting, action, actor=None):
        if to in self.raising:
            raise ConnectionError(f"SMTP connection to deliver {to} dropped")
        if to in self.failing:
            return False
        self.sent.append(
            {
                "to": to,
                "subject": subject,
                "meeting_id": meeting.id,
                "action": action.value,
                "actor": actor,
            }
        )
        return True


@pytest.fixture(autouse=True)
def _reset_db():
    """
    Automatically reset the DB before each test so every test gets a clean
    schema and empty tables.
    """
    reset_schema_sync()


@pytest.fixture
def repo() -> InMemoryMeetingRepository:
    return InMemoryMeetingRepository()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
async def session():
    async with AsyncSessionLocal() as db:
        yield db


@pytest.fixture
def client(sender):
    """
    TestClient over a fresh app whose notifications go to `sender`
    instead of SMTP.
    """
    app = create_app()
    app.dependency_overrides[get_notification_dispatcher] = lambda: NotificationDispatcher(
        send=sender,
        recorder=record_notification_report,
    )
    with TestClient(app) as test_client:
        yield test_client
