# roombook/api/routes/rooms.py
from fastapi import APIRouter

from roombook.core.config import get_settings

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get(
    "",
    response_model=list[str],
    summary="List bookable rooms",
    description="Rooms configured for this deployment, in display order.",
)
async def list_rooms() -> list[str]:
    return get_settings().room_names
