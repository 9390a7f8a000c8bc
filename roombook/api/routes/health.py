# roombook/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from roombook.core.config import get_settings
from roombook.db.session import get_db

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health check endpoint.
    """

    status: str = Field(
        ...,
        description="'ok', or 'degraded' when a deep check found the database unreachable.",
        examples=["ok"],
    )
    app_name: str = Field(..., examples=["RoomBook"])
    environment: str = Field(..., examples=["local"])
    rooms: list[str] = Field(
        ...,
        description="Rooms that can currently be booked.",
        examples=[["Room A", "Room B"]],
    )
    database_ok: bool | None = Field(
        None,
        description="Result of the database probe; only set when `deep=true`.",
    )
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) at which this health check was generated.",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check for the RoomBook service",
    description=(
        "Lightweight liveness endpoint for container probes and uptime monitors.\n\n"
        "By default it touches no external system. With `deep=true` it also runs a "
        "trivial query against the meeting database and reports `degraded` if that fails."
    ),
)
async def health_check(
    deep: bool = Query(default=False, description="Also probe the database."),
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    settings = get_settings()

    database_ok: bool | None = None
    if deep:
        try:
            await db.execute(text("SELECT 1"))
            database_ok = True
        except SQLAlchemyError:
            database_ok = False

    return HealthResponse(
        status="degraded" if database_ok is False else "ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        rooms=settings.room_names,
        database_ok=database_ok,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
