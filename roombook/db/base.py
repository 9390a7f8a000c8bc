# roombook/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the RoomBook service.
    """
    pass


# Import ORM models so that Base.metadata is aware of them
# This import should stay at the bottom to avoid circular dependencies.
import roombook.models.meeting  # noqa: E402,F401
import roombook.models.notification_log  # noqa: E402,F401
