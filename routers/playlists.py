import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import Conflict, InvalidArgument, NotFound
from core.kinds import EntityKind
from core.security import get_current_user, get_optional_user
from models.playlist import Playlist, PlaylistVideo
from models.user import User
from schemas.playlist import PlaylistCreate, PlaylistRead, PlaylistUpdate, PlaylistView
from schemas.response import ApiResponse
from services import cascade, view_composer
from services.ownership import get_or_404, load_owned
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params

router = APIRouter(prefix="/playlists", tags=["playlists"])
logger = logging.getLogger("uvicorn.error")


def _name_and_description(payload: PlaylistCreate):
    name, description = payload.name.strip(), payload.description.strip()
    if not name or not description:
        raise InvalidArgument("Name and description both are required")
    return name, description


async def _membership(db: AsyncSession, playlist_id: int, video_id: int) -> Optional[PlaylistVideo]:
    result = await db.execute(
        select(PlaylistVideo).where(
            PlaylistVideo.playlist_id == playlist_id,
            PlaylistVideo.video_id == video_id,
        )
    )
    return result.scalar_one_or_none()


@router.post(
    "/",
    response_model=ApiResponse[PlaylistRead],
    status_code=status.HTTP_201_CREATED,
    summary="Создать плейлист",
)
async def create_playlist(
    payload: PlaylistCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name, description = _name_and_description(payload)
    playlist = Playlist(owner_id=current_user.id, name=name, description=description)
    db.add(playlist)
    await db.commit()
    await db.refresh(playlist)
    return ApiResponse(status=201, data=PlaylistRead.model_validate(playlist), message="Playlist created successfully")


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[List[PlaylistView]],
    summary="Плейлисты пользователя",
)
async def get_user_playlists(
    user_id: int = Path(..., description="ID пользователя"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    await get_or_404(db, User, user_id, "User")
    playlists = await view_composer.compose_view_list(
        db, EntityKind.PLAYLIST, ViewFilter(owner_id=user_id), page, viewer.id if viewer else None
    )
    return ApiResponse(status=200, data=playlists, message="User playlists fetched successfully")


@router.get(
    "/{playlist_id}",
    response_model=ApiResponse[PlaylistView],
    summary="Плейлист с видео",
)
async def get_playlist(
    playlist_id: int = Path(..., description="ID плейлиста"),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    view = await view_composer.compose_view(db, playlist_id, EntityKind.PLAYLIST, viewer.id if viewer else None)
    return ApiResponse(status=200, data=view, message="Playlist fetched successfully")


@router.patch(
    "/{playlist_id}",
    response_model=ApiResponse[PlaylistRead],
    summary="Переименовать плейлист",
)
async def update_playlist(
    payload: PlaylistUpdate,
    playlist_id: int = Path(..., description="ID плейлиста"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name, description = _name_and_description(payload)
    playlist = await load_owned(db, Playlist, playlist_id, current_user.id, "Playlist")

    playlist.name = name
    playlist.description = description
    db.add(playlist)
    await db.commit()
    await db.refresh(playlist)
    return ApiResponse(status=200, data=PlaylistRead.model_validate(playlist), message="Playlist updated successfully")


@router.delete(
    "/{playlist_id}",
    response_model=ApiResponse[None],
    summary="Удалить плейлист",
)
async def delete_playlist(
    playlist_id: int = Path(..., description="ID плейлиста"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await load_owned(db, Playlist, playlist_id, current_user.id, "Playlist")
    await cascade.delete_entity(db, playlist_id, EntityKind.PLAYLIST)
    return ApiResponse(status=200, data=None, message="Playlist deleted successfully")


@router.patch(
    "/add/{video_id}/{playlist_id}",
    response_model=ApiResponse[PlaylistView],
    summary="Добавить видео в плейлист",
)
async def add_video_to_playlist(
    video_id: int = Path(..., description="ID видео"),
    playlist_id: int = Path(..., description="ID плейлиста"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await load_owned(db, Playlist, playlist_id, current_user.id, "Playlist")
    await view_composer.get_visible(db, video_id, EntityKind.VIDEO, current_user.id)

    if await _membership(db, playlist_id, video_id) is not None:
        raise Conflict("Video is already in the playlist")

    db.add(PlaylistVideo(playlist_id=playlist_id, video_id=video_id))
    try:
        await db.commit()
    except IntegrityError:
        # параллельное добавление того же видео
        await db.rollback()
        raise Conflict("Video is already in the playlist")

    logger.info(f"Video {video_id} added to playlist {playlist_id}")
    view = await view_composer.compose_view(db, playlist_id, EntityKind.PLAYLIST, current_user.id)
    return ApiResponse(status=200, data=view, message="Video added to playlist successfully")


@router.patch(
    "/remove/{video_id}/{playlist_id}",
    response_model=ApiResponse[PlaylistView],
    summary="Убрать видео из плейлиста",
)
async def remove_video_from_playlist(
    video_id: int = Path(..., description="ID видео"),
    playlist_id: int = Path(..., description="ID плейлиста"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await load_owned(db, Playlist, playlist_id, current_user.id, "Playlist")

    membership = await _membership(db, playlist_id, video_id)
    if membership is None:
        raise NotFound("Video is not in the playlist")

    await db.delete(membership)
    await db.commit()
    view = await view_composer.compose_view(db, playlist_id, EntityKind.PLAYLIST, current_user.id)
    return ApiResponse(status=200, data=view, message="Video removed from playlist successfully")
