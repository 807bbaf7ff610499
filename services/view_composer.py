"""Сборка денормализованных представлений.

Представление = сущность + публичный профиль владельца + счётчики фактов
(counts) + флаги относительно зрителя (viewer_flags) + is_owner.
Счётчики не хранятся на сущностях и считаются при каждом чтении,
пачкой на страницу: один сгруппированный запрос на вид счётчика.

Набор форм фиксирован:

    video    counts: like, comments, subscription   flags: like, subscription
    comment  counts: like                           flags: like
    tweet    counts: like                           flags: like
    playlist counts: videos                         (+ видео внутри)
    channel  counts: subscription, subscribed_to, videos   flags: subscription

subscription у видео считается по каналу владельца.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import asc, case, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import InvalidArgument, NotFound
from core.kinds import EntityKind, TargetKind
from models.comment import Comment
from models.playlist import Playlist, PlaylistVideo
from models.tweet import Tweet
from models.user import User
from models.video import Video
from schemas.comment import CommentRead, CommentView
from schemas.playlist import PlaylistRead, PlaylistView
from schemas.tweet import TweetRead, TweetView
from schemas.user import ChannelView, OwnerProfile, UserRead
from schemas.video import VideoRead, VideoView
from services import relationship_store

# ключи counts и viewer_flags по виду отношения
LIKE = "like"
SUBSCRIPTION = "subscription"

_DIRECTIONS = {"asc": asc, "1": asc, "desc": desc, "-1": desc}


@dataclass(frozen=True)
class _Shape:
    model: Any
    read_schema: Any
    view_schema: Any
    label: str
    sort_fields: Tuple[str, ...]
    search_fields: Tuple[str, ...]
    like_kind: Optional[TargetKind] = None


_SHAPES = {
    EntityKind.VIDEO: _Shape(
        Video, VideoRead, VideoView, "Video",
        ("created_at", "updated_at", "title", "views", "duration"),
        ("title", "description"),
        TargetKind.VIDEO,
    ),
    EntityKind.COMMENT: _Shape(
        Comment, CommentRead, CommentView, "Comment",
        ("created_at", "updated_at"),
        ("content",),
        TargetKind.COMMENT,
    ),
    EntityKind.TWEET: _Shape(
        Tweet, TweetRead, TweetView, "Tweet",
        ("created_at", "updated_at"),
        ("content",),
        TargetKind.TWEET,
    ),
    EntityKind.PLAYLIST: _Shape(
        Playlist, PlaylistRead, PlaylistView, "Playlist",
        ("created_at", "updated_at", "name"),
        ("name", "description"),
    ),
    EntityKind.CHANNEL: _Shape(
        User, UserRead, ChannelView, "Channel",
        ("created_at", "username", "full_name"),
        ("username", "full_name"),
    ),
}


@dataclass
class PageRequest:
    page: int = 1
    page_size: int = field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)
    sort_by: str = "created_at"
    sort_type: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class ViewFilter:
    owner_id: Optional[int] = None
    video_id: Optional[int] = None
    query: Optional[str] = None
    published_only: bool = False
    ids: Optional[Sequence[int]] = None
    # порядок ids вместо сортировки страницы (история, лайки, подписки)
    keep_ids_order: bool = False


def _order_by(kind: EntityKind, page: PageRequest) -> list:
    """Проверяет параметры страницы и возвращает ORDER BY."""
    if isinstance(page.page, bool) or not isinstance(page.page, int) or page.page < 1:
        raise InvalidArgument("page must be a positive integer")
    if (
        isinstance(page.page_size, bool)
        or not isinstance(page.page_size, int)
        or not 1 <= page.page_size <= settings.MAX_PAGE_SIZE
    ):
        raise InvalidArgument(f"limit must be between 1 and {settings.MAX_PAGE_SIZE}")

    shape = _SHAPES[kind]
    if page.sort_by not in shape.sort_fields:
        raise InvalidArgument(
            f"sort_by must be one of: {', '.join(shape.sort_fields)}"
        )
    direction = _DIRECTIONS.get(str(page.sort_type).strip().lower())
    if direction is None:
        raise InvalidArgument("sort_type must be one of: asc, desc, 1, -1")
    # id как второй ключ, чтобы страницы не перемешивались при равенстве
    return [direction(getattr(shape.model, page.sort_by)), direction(shape.model.id)]


def video_visibility(viewer_id: Optional[int]):
    """Неопубликованные видео видит только владелец."""
    if viewer_id is None:
        return Video.is_published.is_(True)
    return or_(Video.is_published.is_(True), Video.owner_id == viewer_id)


def _video_visible(video: Optional[Video], viewer_id: Optional[int]) -> bool:
    return video is not None and (bool(video.is_published) or video.owner_id == viewer_id)


async def _is_visible(db: AsyncSession, kind: EntityKind, entity: Any, viewer_id: Optional[int]) -> bool:
    if kind is EntityKind.VIDEO:
        return _video_visible(entity, viewer_id)
    if kind is EntityKind.COMMENT:
        # комментарий виден, только если видно его видео
        return _video_visible(await db.get(Video, entity.video_id), viewer_id)
    return True


async def get_visible(
    db: AsyncSession, entity_id: int, kind: EntityKind, viewer_id: Optional[int] = None
) -> Any:
    """Сущность, если она существует и видна зрителю, иначе NotFound."""
    shape = _SHAPES[kind]
    entity = await db.get(shape.model, entity_id)
    if entity is None or not await _is_visible(db, kind, entity, viewer_id):
        raise NotFound(f"{shape.label} not found")
    return entity


def _filtered(kind: EntityKind, stmt, view_filter: ViewFilter, viewer_id: Optional[int]):
    shape = _SHAPES[kind]
    model = shape.model

    if view_filter.ids is not None:
        stmt = stmt.where(model.id.in_(list(view_filter.ids)))
    if view_filter.owner_id is not None:
        if kind is EntityKind.CHANNEL:
            stmt = stmt.where(User.id == view_filter.owner_id)
        else:
            stmt = stmt.where(model.owner_id == view_filter.owner_id)
    if view_filter.video_id is not None:
        if kind is not EntityKind.COMMENT:
            raise InvalidArgument("video filter applies to comments only")
        stmt = stmt.where(Comment.video_id == view_filter.video_id)

    query = (view_filter.query or "").strip()
    if query:
        stmt = stmt.where(
            or_(*[
                getattr(model, name).icontains(query, autoescape=True)
                for name in shape.search_fields
            ])
        )

    if kind is EntityKind.VIDEO:
        stmt = stmt.where(video_visibility(viewer_id))
        if view_filter.published_only:
            stmt = stmt.where(Video.is_published.is_(True))
    elif kind is EntityKind.COMMENT:
        stmt = stmt.where(Comment.video_id.in_(select(Video.id).where(video_visibility(viewer_id))))
    return stmt


async def compose_view(
    db: AsyncSession,
    entity_id: int,
    kind: EntityKind,
    viewer_id: Optional[int] = None,
):
    """Одиночное представление сущности. NotFound, если её нет или она не видна."""
    entity = await get_visible(db, entity_id, kind, viewer_id)
    views = await _compose(db, kind, [entity], viewer_id)
    view = views[0]
    if kind is EntityKind.PLAYLIST:
        view.videos = await _playlist_videos(db, entity.id, viewer_id)
    return view


async def compose_view_list(
    db: AsyncSession,
    kind: EntityKind,
    view_filter: ViewFilter,
    page: PageRequest,
    viewer_id: Optional[int] = None,
) -> list:
    """Страница представлений: фильтр → сортировка → offset/limit → счётчики пачкой."""
    order_by = _order_by(kind, page)
    if view_filter.ids is not None and not view_filter.ids:
        return []

    stmt = _filtered(kind, select(_SHAPES[kind].model), view_filter, viewer_id)
    if view_filter.keep_ids_order and view_filter.ids is not None:
        model = _SHAPES[kind].model
        positions = {entity_id: position for position, entity_id in enumerate(view_filter.ids)}
        order_by = [case(positions, value=model.id), model.id]
    stmt = stmt.order_by(*order_by).offset(page.offset).limit(page.page_size)
    rows = (await db.execute(stmt)).scalars().all()
    return await _compose(db, kind, rows, viewer_id)


async def count_matching(
    db: AsyncSession,
    kind: EntityKind,
    view_filter: ViewFilter,
    viewer_id: Optional[int] = None,
) -> int:
    """Сколько всего сущностей подходит под фильтр (без пагинации)."""
    if view_filter.ids is not None and not view_filter.ids:
        return 0
    model = _SHAPES[kind].model
    stmt = _filtered(kind, select(func.count(model.id)), view_filter, viewer_id)
    return (await db.execute(stmt)).scalar_one()


async def _owner_profiles(db: AsyncSession, owner_ids: Iterable[int]) -> Dict[int, OwnerProfile]:
    ids = list(set(owner_ids))
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: OwnerProfile.model_validate(user) for user in result.scalars().all()}


async def _grouped_count(db: AsyncSession, key_col, count_col, ids: List[int], *where) -> Dict[int, int]:
    result = await db.execute(
        select(key_col, func.count(count_col))
        .where(key_col.in_(ids), *where)
        .group_by(key_col)
    )
    counts = {entity_id: 0 for entity_id in ids}
    counts.update({key: total for key, total in result.all()})
    return counts


async def _add_facts(
    db: AsyncSession,
    kind: TargetKind,
    keys: Dict[int, int],
    viewer_id: Optional[int],
    counts: Dict[int, dict],
    flags: Dict[int, dict],
    key: str,
) -> None:
    """
    Счётчик и флаг зрителя по фактам вида kind, оба под ключом key.
    keys: id строки → id цели факта (для подписчиков видео это владелец).
    """
    targets = set(keys.values())
    totals = await relationship_store.count_by_target(db, kind, targets)
    marked = set()
    if viewer_id is not None:
        marked = await relationship_store.actor_targets(db, viewer_id, kind, targets)
    for row_id, target_id in keys.items():
        counts[row_id][key] = totals.get(target_id, 0)
        flags[row_id][key] = target_id in marked


async def _compose(
    db: AsyncSession, kind: EntityKind, rows: Sequence[Any], viewer_id: Optional[int]
) -> list:
    if not rows:
        return []
    shape = _SHAPES[kind]
    ids = [row.id for row in rows]
    counts: Dict[int, dict] = {row_id: {} for row_id in ids}
    flags: Dict[int, dict] = {row_id: {} for row_id in ids}

    if shape.like_kind is not None:
        await _add_facts(
            db, shape.like_kind, {row.id: row.id for row in rows},
            viewer_id, counts, flags, LIKE,
        )

    if kind is EntityKind.VIDEO:
        comments = await _grouped_count(db, Comment.video_id, Comment.id, ids)
        for row_id in ids:
            counts[row_id]["comments"] = comments[row_id]
        await _add_facts(
            db, TargetKind.CHANNEL, {row.id: row.owner_id for row in rows},
            viewer_id, counts, flags, SUBSCRIPTION,
        )
    elif kind is EntityKind.PLAYLIST:
        videos = await _grouped_count(
            db, PlaylistVideo.playlist_id, PlaylistVideo.id, ids,
            PlaylistVideo.video_id.in_(select(Video.id).where(video_visibility(viewer_id))),
        )
        for row_id in ids:
            counts[row_id]["videos"] = videos[row_id]
    elif kind is EntityKind.CHANNEL:
        await _add_facts(
            db, TargetKind.CHANNEL, {row.id: row.id for row in rows},
            viewer_id, counts, flags, SUBSCRIPTION,
        )
        following = await relationship_store.count_by_actor(db, TargetKind.CHANNEL, ids)
        videos = await _grouped_count(db, Video.owner_id, Video.id, ids, video_visibility(viewer_id))
        for row_id in ids:
            counts[row_id]["subscribed_to"] = following[row_id]
            counts[row_id]["videos"] = videos[row_id]

    owners = {}
    if kind is not EntityKind.CHANNEL:
        owners = await _owner_profiles(db, (row.owner_id for row in rows))

    views = []
    for row in rows:
        owner_id = row.id if kind is EntityKind.CHANNEL else row.owner_id
        data = shape.read_schema.model_validate(row).model_dump()
        data.update(
            counts=counts[row.id],
            viewer_flags=flags[row.id],
            is_owner=viewer_id is not None and viewer_id == owner_id,
        )
        if kind is not EntityKind.CHANNEL:
            data["owner"] = owners.get(owner_id)
        views.append(shape.view_schema(**data))
    return views


async def _playlist_videos(
    db: AsyncSession, playlist_id: int, viewer_id: Optional[int]
) -> List[VideoView]:
    result = await db.execute(
        select(Video)
        .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
        .where(PlaylistVideo.playlist_id == playlist_id, video_visibility(viewer_id))
        .order_by(PlaylistVideo.created_at, PlaylistVideo.id)
    )
    return await _compose(db, EntityKind.VIDEO, result.scalars().all(), viewer_id)
