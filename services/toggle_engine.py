import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import InvalidArgument, Internal, NotFound
from core.kinds import TargetKind
from models.comment import Comment
from models.tweet import Tweet
from models.user import User
from models.video import Video
from services import relationship_store
from services.relationship_store import Fact

logger = logging.getLogger(__name__)

CREATED = "created"
REMOVED = "removed"

_TARGET_MODELS = {
    TargetKind.VIDEO: Video,
    TargetKind.COMMENT: Comment,
    TargetKind.TWEET: Tweet,
    TargetKind.CHANNEL: User,
}

_NOT_FOUND = {
    TargetKind.VIDEO: "Video not found",
    TargetKind.COMMENT: "No such comment exists",
    TargetKind.TWEET: "No such tweet found",
    TargetKind.CHANNEL: "Channel not found",
}


@dataclass
class ToggleResult:
    state: str
    fact: Optional[Fact] = None


async def _ensure_target(db: AsyncSession, actor_id: int, target_id: int, kind: TargetKind) -> None:
    target = await db.get(_TARGET_MODELS[kind], target_id)
    if target is None:
        raise NotFound(_NOT_FOUND[kind])
    # неопубликованное видео видит только владелец
    if kind is TargetKind.VIDEO and not target.is_published and target.owner_id != actor_id:
        raise NotFound(_NOT_FOUND[kind])
    if kind is TargetKind.COMMENT:
        video = await db.get(Video, target.video_id)
        if video is None or (not video.is_published and video.owner_id != actor_id):
            raise NotFound(_NOT_FOUND[kind])
    if kind is TargetKind.CHANNEL and target.id == actor_id:
        raise InvalidArgument("You cannot subscribe to your own channel")


async def toggle(
    db: AsyncSession, actor_id: int, target_id: int, kind: TargetKind
) -> ToggleResult:
    """
    Переключает факт (actor, target, kind):
    - если факт был, удаляет его, состояние "removed";
    - если не было, создаёт, состояние "created".
    Двойной вызов подряд возвращает исходное состояние и никогда
    не даёт двух фактов на одну тройку.
    """
    await _ensure_target(db, actor_id, target_id, kind)

    if await relationship_store.delete_fact(db, actor_id, target_id, kind):
        logger.info("%s %s removed by %s", kind.value, target_id, actor_id)
        return ToggleResult(state=REMOVED)

    try:
        fact = await relationship_store.insert_fact(db, actor_id, target_id, kind)
    except IntegrityError as exc:
        # конфликт без существующей строки: например, цель удалена параллельно
        raise Internal(f"Could not store {kind.value} relationship") from exc

    if fact is None or fact.id is None:
        raise Internal(f"Server error while creating the {kind.value} relationship")

    logger.info("%s %s created by %s", kind.value, target_id, actor_id)
    return ToggleResult(state=CREATED, fact=fact)
