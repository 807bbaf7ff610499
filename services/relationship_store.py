"""Хранилище фактов-отношений (лайки и подписки).

Факт: уникальная тройка (actor, target, kind). Лайки лежат в таблице likes
с колонкой target_kind, подписки (kind=channel) в таблице subscriptions.
Уникальность обеспечивает ограничение в БД, а не код.
"""
import logging
from typing import Dict, Iterable, List, Optional, Set, Union

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.kinds import TargetKind
from models.like import Like
from models.subscription import Subscription

logger = logging.getLogger(__name__)

Fact = Union[Like, Subscription]


def _table(kind: TargetKind):
    """(модель, колонка актора, колонка цели, доп. условия) для вида факта."""
    if kind is TargetKind.CHANNEL:
        return Subscription, Subscription.subscriber_id, Subscription.channel_id, ()
    return Like, Like.liked_by_id, Like.target_id, (Like.target_kind == kind.value,)


def _new_fact(kind: TargetKind, actor_id: int, target_id: int) -> Fact:
    if kind is TargetKind.CHANNEL:
        return Subscription(subscriber_id=actor_id, channel_id=target_id)
    return Like(liked_by_id=actor_id, target_id=target_id, target_kind=kind.value)


async def find_fact(
    db: AsyncSession, actor_id: int, target_id: int, kind: TargetKind
) -> Optional[Fact]:
    model, actor_col, target_col, extra = _table(kind)
    result = await db.execute(
        select(model).where(actor_col == actor_id, target_col == target_id, *extra)
    )
    return result.scalar_one_or_none()


async def delete_fact(
    db: AsyncSession, actor_id: int, target_id: int, kind: TargetKind
) -> bool:
    """Атомарный delete-if-exists. True, если строка была удалена."""
    model, actor_col, target_col, extra = _table(kind)
    result = await db.execute(
        delete(model)
        .where(actor_col == actor_id, target_col == target_id, *extra)
    )
    await db.commit()
    return (result.rowcount or 0) > 0


async def insert_fact(
    db: AsyncSession, actor_id: int, target_id: int, kind: TargetKind
) -> Fact:
    """
    Вставляет факт. Если параллельный запрос успел вставить такой же,
    нарушение уникальности схлопывается в уже существующий факт.
    """
    fact = _new_fact(kind, actor_id, target_id)
    db.add(fact)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(
            "Fact %s %s→%s already exists, reusing it", kind.value, actor_id, target_id
        )
        existing = await find_fact(db, actor_id, target_id, kind)
        if existing is None:
            raise
        return existing
    await db.refresh(fact)
    return fact


async def count_by_target(
    db: AsyncSession, kind: TargetKind, target_ids: Iterable[int]
) -> Dict[int, int]:
    """Число фактов на каждую цель одним запросом. Цели без фактов → 0."""
    ids = list(set(target_ids))
    if not ids:
        return {}
    model, _, target_col, extra = _table(kind)
    result = await db.execute(
        select(target_col, func.count(model.id))
        .where(target_col.in_(ids), *extra)
        .group_by(target_col)
    )
    counts = {target_id: 0 for target_id in ids}
    counts.update({target_id: total for target_id, total in result.all()})
    return counts


async def count_by_actor(
    db: AsyncSession, kind: TargetKind, actor_ids: Iterable[int]
) -> Dict[int, int]:
    """Сколько фактов поставил каждый актор (например, на сколько каналов подписан)."""
    ids = list(set(actor_ids))
    if not ids:
        return {}
    model, actor_col, _, extra = _table(kind)
    result = await db.execute(
        select(actor_col, func.count(model.id))
        .where(actor_col.in_(ids), *extra)
        .group_by(actor_col)
    )
    counts = {actor_id: 0 for actor_id in ids}
    counts.update({actor_id: total for actor_id, total in result.all()})
    return counts


async def actor_targets(
    db: AsyncSession, actor_id: int, kind: TargetKind, target_ids: Iterable[int]
) -> Set[int]:
    """Подмножество target_ids, на которые у актора есть факт."""
    ids = list(set(target_ids))
    if not ids:
        return set()
    _, actor_col, target_col, extra = _table(kind)
    result = await db.execute(
        select(target_col).where(actor_col == actor_id, target_col.in_(ids), *extra)
    )
    return {row[0] for row in result.all()}


async def target_ids_for_actor(
    db: AsyncSession, actor_id: int, kind: TargetKind
) -> List[int]:
    model, actor_col, target_col, extra = _table(kind)
    result = await db.execute(
        select(target_col)
        .where(actor_col == actor_id, *extra)
        .order_by(model.created_at.desc(), model.id)
    )
    return [row[0] for row in result.all()]


async def actor_ids_for_target(
    db: AsyncSession, target_id: int, kind: TargetKind
) -> List[int]:
    model, actor_col, target_col, extra = _table(kind)
    result = await db.execute(
        select(actor_col)
        .where(target_col == target_id, *extra)
        .order_by(model.created_at.desc(), model.id)
    )
    return [row[0] for row in result.all()]


async def purge_targets(
    db: AsyncSession, kind: TargetKind, target_ids: Iterable[int]
) -> None:
    """Удаляет все факты на цели. Не коммитит: это шаг каскадного удаления."""
    ids = list(set(target_ids))
    if not ids:
        return
    model, _, target_col, extra = _table(kind)
    await db.execute(
        delete(model)
        .where(target_col.in_(ids), *extra)
    )
