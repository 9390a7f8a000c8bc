# roombook/main.py
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from roombook.api.routes import health, meetings, rooms
from roombook.core.config import get_settings
from roombook.core.exceptions import PersistenceError
from roombook.core.logging import configure_logging
from roombook.db.session import init_db_for_startup

logger = logging.getLogger(__name__)


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        content={"detail": "The meeting store is unavailable. Please retry later."},
    )


def create_app() -> FastAPI:
    """
    Application factory for the RoomBook service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Backend service for booking shared conference rooms: availability checks\n"
            "against room occupancy and participant calendars, meeting create/update/cancel,\n"
            "and email notifications to participants and organizers."
        ),
        version="0.1.0",
    )

    # Routers
    app.include_router(health.router)
    app.include_router(rooms.router)
    app.include_router(meetings.router)

    app.add_exception_handler(PersistenceError, persistence_error_handler)

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db_for_startup()

    return app


app = create_app()
