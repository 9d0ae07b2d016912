from collections.abc import AsyncGenerator
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.config import settings

logger = logging.getLogger(__name__)

if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is not set")


def _engine_options() -> dict[str, Any]:
    if settings.is_sqlite:
        return {}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        # Receiving commits lock the purchase order row; don't wait forever.
        "connect_args": {
            "server_settings": {"lock_timeout": f"{settings.database_lock_timeout * 1000}"}
        },
    }


# Hide credentials in logs
_url_for_log = (
    settings.database_url.split("@")[1]
    if "@" in settings.database_url
    else settings.database_url[:30]
)
logger.info("Connecting to database ...@%s", _url_for_log)

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    **_engine_options(),
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
