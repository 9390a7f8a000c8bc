# roombook/services/notification_log.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roombook.db.session import AsyncSessionLocal
from roombook.models.notification_log import NotificationLog
from roombook.schemas.notification import NotificationLogRead, NotificationReport


async def record_notification_report(report: NotificationReport) -> None:
    """
    Persist every outcome of a notification fan-out.

    Runs after the request that triggered it has finished, so it opens its
    own session instead of borrowing the request's.
    """
    async with AsyncSessionLocal() as session:
        session.add_all(
            [
                NotificationLog(
                    meeting_id=report.meeting_id,
                    recipient=outcome.recipient,
                    action=report.action.value,
                    status=outcome.status.value,
                    error_message=outcome.error_message,
                )
                for outcome in report.outcomes
            ]
        )
        await session.commit()


async def list_notification_logs(db: AsyncSession, meeting_id: int) -> list[NotificationLogRead]:
    stmt = (
        select(NotificationLog)
        .where(NotificationLog.meeting_id == meeting_id)
        .order_by(NotificationLog.sent_at.asc(), NotificationLog.id.asc())
    )
    result = await db.execute(stmt)
    return [NotificationLogRead.model_validate(log) for log in result.scalars().all()]
