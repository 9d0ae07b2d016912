from src.core.database.session import async_session, engine, get_db
from src.core.database.base import (
    Base,
    BaseModel,
    BigIntPK,
    CreatedAtMixin,
    TimestampMixin,
)

__all__ = [
    "async_session",
    "engine",
    "get_db",
    "Base",
    "BaseModel",
    "BigIntPK",
    "CreatedAtMixin",
    "TimestampMixin",
]
