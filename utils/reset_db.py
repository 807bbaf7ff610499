"""Создание и пересоздание схемы БД.

    python -m utils.reset_db   # удалить все таблицы и создать заново
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from core.database import engine
from models.base import Base
# регистрируем все таблицы в Base.metadata
from models import comment, like, playlist, subscription, tweet, user, video, watch_history  # noqa: F401

log = logging.getLogger(__name__)


async def create_tables(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)


async def async_reset_database(bind: AsyncEngine = engine) -> None:
    log.info("Dropping all tables...")
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, checkfirst=True)

    log.info("Recreating all tables...")
    await create_tables(bind)

    log.info("Database schema has been reset.")


def reset_database():
    asyncio.run(async_reset_database())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    reset_database()
