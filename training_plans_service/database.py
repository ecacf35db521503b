from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings


def ensure_async_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def create_async_engine_and_session(
    database_url: str,
    *,
    echo: bool = False,
    **engine_kwargs: Any,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(ensure_async_url(database_url), echo=echo, **engine_kwargs)
    # Services hand ORM rows to response builders after commit
    session_factory = async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=True,
        class_=AsyncSession,
    )
    return engine, session_factory


settings = get_settings()
engine, AsyncSessionLocal = create_async_engine_and_session(
    settings.TRAINING_PLANS_DATABASE_URL,
    echo=settings.DEBUG,
)
