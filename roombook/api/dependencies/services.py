# roombook/api/dependencies/services.py
from fastapi import BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from roombook.core.config import get_settings
from roombook.db.session import get_db
from roombook.services.availability import AvailabilityEngine
from roombook.services.meeting_coordinator import MeetingCoordinator
from roombook.services.meeting_repository import SqlAlchemyMeetingRepository
from roombook.services.notification_dispatcher import NotificationDispatcher
from roombook.services.notification_log import record_notification_report


def get_meeting_repository(db: AsyncSession = Depends(get_db)) -> SqlAlchemyMeetingRepository:
    return SqlAlchemyMeetingRepository(db)


def get_notification_dispatcher() -> NotificationDispatcher | None:
    """
    Dispatcher used for meeting emails; None disables notifications.
    """
    if not get_settings().NOTIFICATIONS_ENABLED:
        return None
    return NotificationDispatcher(recorder=record_notification_report)


def get_availability_engine(
    repository: SqlAlchemyMeetingRepository = Depends(get_meeting_repository),
) -> AvailabilityEngine:
    return AvailabilityEngine(repository, get_settings().room_names)


def get_meeting_coordinator(
    background_tasks: BackgroundTasks,
    repository: SqlAlchemyMeetingRepository = Depends(get_meeting_repository),
    dispatcher: NotificationDispatcher | None = Depends(get_notification_dispatcher),
) -> MeetingCoordinator:
    settings = get_settings()
    return MeetingCoordinator(
        repository,
        settings.room_names,
        dispatcher,
        enforce_room_availability=settings.ENFORCE_ROOM_AVAILABILITY,
        schedule=background_tasks.add_task,
        note_max_length=settings.NOTE_MAX_LENGTH,
        day_start_hour=settings.BUSINESS_DAY_START_HOUR,
        last_start_hour=settings.LAST_START_HOUR,
        day_end_hour=settings.BUSINESS_DAY_END_HOUR,
        step=settings.SLOT_MINUTES,
    )
