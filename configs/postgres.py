from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import quote

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from configs.settings import get_settings


class Base(DeclarativeBase):
    pass


def get_postgres_url(is_async: bool = True) -> str:
    settings = get_settings()
    password = quote(settings.POSTGRES_PASSWORD)
    driver = "postgresql+psycopg_async" if is_async else "postgresql+psycopg"
    return (
        f"{driver}://{settings.POSTGRES_USER}:{password}"
        f"@{settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
    )


engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def init_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        return
    engine = create_async_engine(
        url=get_postgres_url(is_async=True),
        echo=False,
        pool_pre_ping=True,
        pool_size=get_settings().POSTGRES_POOL_SIZE,
        max_overflow=2,
        pool_recycle=300,
    )
    SessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def get_db():
    """FastAPI dependency yielding a request-scoped session."""
    if SessionLocal is None:
        raise RuntimeError("Database engine is not initialized")
    async with SessionLocal() as session:
        yield session


@asynccontextmanager
async def use_db_session():
    """Session that commits on success and rolls back on error."""
    if SessionLocal is None:
        raise RuntimeError("Database engine is not initialized")
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def shutdown_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    SessionLocal = None
