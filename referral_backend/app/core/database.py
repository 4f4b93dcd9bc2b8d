from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from referral_backend.app.core.settings import Settings


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build the async engine; the pool is sized from settings."""
    return create_async_engine(
        url=settings.db_url,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # Проверка соединения перед использованием
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_timeout=30,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)
