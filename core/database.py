from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings


def _is_memory_sqlite(url: str) -> bool:
    if not url.startswith("sqlite"):
        return False
    path = url.split("://", 1)[-1].split("?", 1)[0].strip("/")
    return path in ("", ":memory:")


def _engine_options(url: str) -> dict:
    if _is_memory_sqlite(url):
        # in-memory базе нужен один общий коннект
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    if url.startswith("sqlite"):
        return {}
    options = {"pool_pre_ping": True, "pool_timeout": settings.DB_POOL_TIMEOUT}
    if url.startswith("postgresql+asyncpg"):
        options["connect_args"] = {"command_timeout": settings.DB_COMMAND_TIMEOUT}
    return options


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    **_engine_options(settings.DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Асинхронный генератор сессии, одна сессия на запрос.
    Используется как Depends(get_db) в роутерах.
    """
    async with AsyncSessionLocal() as session:
        yield session
