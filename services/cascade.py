"""Каскадное удаление сущностей.

Дочерние записи и факты удаляются раньше родителя, всё в одной транзакции
сессии запроса; удаление родителя и коммит фиксируют результат. Любой сбой
откатывает транзакцию и превращается в Internal, повторов нет.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Internal, InvalidArgument, NotFound
from core.kinds import EntityKind, TargetKind
from models.comment import Comment
from models.playlist import Playlist, PlaylistVideo
from models.tweet import Tweet
from models.video import Video
from models.watch_history import WatchHistory
from services import relationship_store

logger = logging.getLogger(__name__)

_MODELS = {
    EntityKind.VIDEO: Video,
    EntityKind.COMMENT: Comment,
    EntityKind.TWEET: Tweet,
    EntityKind.PLAYLIST: Playlist,
}


async def _delete_video_children(db: AsyncSession, video_id: int) -> None:
    comment_ids = (
        await db.execute(select(Comment.id).where(Comment.video_id == video_id))
    ).scalars().all()
    await relationship_store.purge_targets(db, TargetKind.COMMENT, comment_ids)
    await db.execute(delete(Comment).where(Comment.video_id == video_id))
    await relationship_store.purge_targets(db, TargetKind.VIDEO, [video_id])
    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.video_id == video_id))
    await db.execute(delete(WatchHistory).where(WatchHistory.video_id == video_id))


async def delete_entity(db: AsyncSession, entity_id: int, kind: EntityKind) -> None:
    """Удаляет сущность вместе со всем, что на неё ссылается."""
    model = _MODELS.get(kind)
    if model is None:
        raise InvalidArgument(f"Cannot delete entities of kind {kind.value}")

    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFound(f"{kind.value.capitalize()} not found")

    try:
        if kind is EntityKind.VIDEO:
            await _delete_video_children(db, entity_id)
        elif kind is EntityKind.COMMENT:
            await relationship_store.purge_targets(db, TargetKind.COMMENT, [entity_id])
        elif kind is EntityKind.TWEET:
            await relationship_store.purge_targets(db, TargetKind.TWEET, [entity_id])
        elif kind is EntityKind.PLAYLIST:
            await db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == entity_id))

        await db.delete(entity)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Cascade delete of %s %s failed: %s", kind.value, entity_id, exc)
        raise Internal(f"Something went wrong while deleting the {kind.value}") from exc

    logger.info("%s %s deleted with dependents", kind.value, entity_id)
