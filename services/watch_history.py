from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.video import Video
from models.watch_history import WatchHistory


async def record_view(db: AsyncSession, video_id: int, viewer_id: Optional[int]) -> None:
    """+1 к просмотрам; у авторизованного зрителя одна строка истории на видео, watched_at обновляется."""
    await db.execute(
        update(Video).where(Video.id == video_id).values(views=Video.views + 1)
    )
    await db.commit()
    if viewer_id is None:
        return

    # повторный просмотр поднимает видео наверх истории
    touched = await db.execute(
        update(WatchHistory)
        .where(WatchHistory.user_id == viewer_id, WatchHistory.video_id == video_id)
        .values(watched_at=func.now())
    )
    if (touched.rowcount or 0) > 0:
        await db.commit()
        return
    db.add(WatchHistory(user_id=viewer_id, video_id=video_id))
    try:
        await db.commit()
    except IntegrityError:
        # параллельный просмотр уже записал историю
        await db.rollback()


async def history_video_ids(db: AsyncSession, user_id: int) -> List[int]:
    result = await db.execute(
        select(WatchHistory.video_id)
        .where(WatchHistory.user_id == user_id)
        .order_by(WatchHistory.watched_at.desc(), WatchHistory.id)
    )
    return [row[0] for row in result.all()]
