# roombook/api/routes/meetings.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from roombook.api.dependencies.api_key import require_read_access, require_write_access
from roombook.api.dependencies.services import get_availability_engine, get_meeting_coordinator
from roombook.core.exceptions import NotFoundError, RoomUnavailableError, ValidationError
from roombook.db.session import get_db
from roombook.schemas.availability import AvailabilityQuery, AvailabilityResult
from roombook.schemas.meeting import (
    MeetingCancel,
    MeetingCreate,
    MeetingCreated,
    MeetingMutationResult,
    MeetingRead,
    MeetingUpdate,
)
from roombook.schemas.notification import NotificationLogRead
from roombook.services.availability import AvailabilityEngine
from roombook.services.meeting_coordinator import MeetingCoordinator
from roombook.services.notification_log import list_notification_logs

router = APIRouter(prefix="/meetings", tags=["Meetings"])

READ = [Depends(require_read_access)]
WRITE = [Depends(require_write_access)]


def _validation_detail(exc: ValidationError) -> dict:
    return {
        "message": str(exc),
        "errors": [e.model_dump() for e in exc.errors],
    }


def _to_http(exc: NotFoundError | ValidationError) -> HTTPException:
    """Translate domain errors into HTTP errors."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    if isinstance(exc, RoomUnavailableError):
        return HTTPException(status_code=HTTPStatus.CONFLICT, detail=_validation_detail(exc))
    return HTTPException(
        status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
        detail=_validation_detail(exc),
    )


@router.post(
    "/availability",
    dependencies=READ,
    response_model=AvailabilityResult,
    status_code=HTTPStatus.OK,
    summary="Check room and participant availability",
    description=(
        "Compute which rooms are free for the given date and time window and which "
        "of the given participants already attend an overlapping meeting.\n\n"
        "- Cancelled meetings are ignored.\n"
        "- Pass `exclude_meeting_id` while editing so a meeting never conflicts with itself.\n"
        "- A meeting ending exactly when the window starts is not a conflict.\n\n"
        "The endpoint is read-only and can be called on every form change."
    ),
    responses={
        200: {
            "description": "Availability computed.",
            "content": {
                "application/json": {
                    "example": {
                        "room_availability": {"Room A": False, "Room B": True},
                        "participant_conflicts": {"alice@example.com": ["Standup"]},
                    }
                }
            },
        },
    },
)
async def check_availability(
    query: AvailabilityQuery,
    engine: AvailabilityEngine = Depends(get_availability_engine),
) -> AvailabilityResult:
    return await engine.check_availability(
        query.date,
        query.start_time,
        query.end_time,
        participants=query.participants,
        exclude_meeting_id=query.exclude_meeting_id,
    )


@router.post(
    "",
    dependencies=WRITE,
    response_model=MeetingCreated,
    status_code=HTTPStatus.CREATED,
    summary="Book a room for a new meeting",
    description=(
        "Create a meeting and invite its participants.\n\n"
        "All booking rules are validated together (business hours 08:00-17:00, "
        "15-minute slots, known room, unique participant emails). When the room is "
        "already taken for an overlapping window the request is rejected with 409.\n\n"
        "Invitations are emailed to every participant and to the organizer after "
        "the response is sent; email failures never fail the request."
    ),
    responses={
        201: {
            "description": "Meeting created.",
            "content": {
                "application/json": {
                    "example": {"id": 12, "message": "Meeting created successfully."}
                }
            },
        },
        409: {"description": "The room is already booked for an overlapping window."},
        422: {"description": "One or more booking rules were violated."},
    },
)
async def create_meeting(
    payload: MeetingCreate,
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> MeetingCreated:
    try:
        meeting_id = await coordinator.create(payload)
    except (ValidationError, NotFoundError) as exc:
        raise _to_http(exc) from exc

    return MeetingCreated(id=meeting_id)


@router.get(
    "",
    dependencies=READ,
    response_model=list[MeetingRead],
    summary="List meetings",
    description=(
        "Return all meetings (including cancelled ones, flagged with `is_cancelled`), "
        "newest date first and by start time within a date.\n\n"
        "Use the optional `date` filter to fetch a single day."
    ),
)
async def list_meetings(
    date: date_type | None = Query(
        default=None,
        description="Only return meetings on this date (YYYY-MM-DD).",
        examples=["2025-11-14"],
    ),
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> list[MeetingRead]:
    return await coordinator.list_meetings(date)


@router.get(
    "/{meeting_id}",
    dependencies=READ,
    response_model=MeetingRead,
    summary="Get meeting details by ID",
    responses={
        404: {
            "description": "No meeting exists with the given ID.",
            "content": {
                "application/json": {
                    "example": {"detail": "Meeting with id 42 not found."}
                }
            },
        },
    },
)
async def get_meeting(
    meeting_id: int = Path(..., description="Numeric ID of the meeting.", ge=1, examples=[12]),
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> MeetingRead:
    try:
        return await coordinator.get(meeting_id)
    except NotFoundError as exc:
        raise _to_http(exc) from exc


@router.patch(
    "/{meeting_id}",
    dependencies=WRITE,
    response_model=MeetingMutationResult,
    summary="Partially update a meeting",
    description=(
        "Change any subset of title, date, times, room, note and participants.\n\n"
        "Only fields present in the body are modified; `participants`, when given, "
        "replaces the whole list. `updated_by` is required. A body carrying no "
        "fields to change returns `changed: false`."
    ),
    responses={
        404: {"description": "No meeting exists with the given ID."},
        409: {"description": "The new placement collides with another booking."},
        422: {"description": "The merged meeting violates a booking rule."},
    },
)
async def update_meeting(
    payload: MeetingUpdate,
    meeting_id: int = Path(..., description="Numeric ID of the meeting to update.", ge=1, examples=[12]),
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> MeetingMutationResult:
    try:
        changed = await coordinator.update(meeting_id, payload.changed_fields(), payload.updated_by)
    except (ValidationError, NotFoundError) as exc:
        raise _to_http(exc) from exc

    return MeetingMutationResult(
        id=meeting_id,
        changed=changed,
        message="Meeting updated successfully." if changed else "No changes were made to the meeting.",
    )


@router.post(
    "/{meeting_id}/cancel",
    dependencies=WRITE,
    response_model=MeetingMutationResult,
    summary="Cancel a meeting",
    description=(
        "Mark the meeting as cancelled. The record is kept for history but no longer "
        "blocks its room or its participants.\n\n"
        "Cancellation emails go out only the first time; repeating the call is harmless."
    ),
    responses={
        404: {"description": "No meeting exists with the given ID."},
    },
)
async def cancel_meeting(
    meeting_id: int = Path(..., description="Numeric ID of the meeting to cancel.", ge=1, examples=[12]),
    payload: MeetingCancel | None = None,
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> MeetingMutationResult:
    try:
        changed = await coordinator.cancel(meeting_id, (payload or MeetingCancel()).cancelled_by)
    except NotFoundError as exc:
        raise _to_http(exc) from exc

    return MeetingMutationResult(
        id=meeting_id,
        changed=changed,
        message="Meeting cancelled successfully.",
    )


@router.get(
    "/{meeting_id}/notifications",
    dependencies=READ,
    response_model=list[NotificationLogRead],
    summary="List notification deliveries for a meeting",
    description=(
        "Return one entry per email attempt (created / updated / cancelled) with "
        "its delivery status, oldest first. Useful to see who was not reached."
    ),
)
async def get_meeting_notifications(
    meeting_id: int = Path(..., description="Numeric ID of the meeting.", ge=1, examples=[12]),
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationLogRead]:
    try:
        await coordinator.get(meeting_id)
    except NotFoundError as exc:
        raise _to_http(exc) from exc

    return await list_notification_logs(db, meeting_id)
