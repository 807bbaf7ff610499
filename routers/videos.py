import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.database import get_db
from core.errors import Internal, InvalidArgument
from core.kinds import EntityKind
from core.security import get_current_user, get_optional_user
from models.user import User
from models.video import Video
from schemas.response import ApiResponse
from schemas.video import VideoRead, VideoView
from services import cascade, view_composer, watch_history
from services.ownership import load_owned
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params
from utils.s3 import delete_object_by_url, upload_thumbnail_to_s3, upload_video_to_s3

router = APIRouter(prefix="/videos", tags=["videos"])
logger = logging.getLogger("uvicorn.error")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


async def _upload_thumbnail(thumbnail: UploadFile) -> str:
    try:
        return await run_in_threadpool(
            upload_thumbnail_to_s3,
            thumbnail.file,
            thumbnail.filename,
            settings.AWS_S3_BUCKET_NAME,
        )
    except ValueError as ve:
        raise InvalidArgument(str(ve))


@router.get(
    "/",
    response_model=ApiResponse[List[VideoView]],
    summary="Список видео: поиск, сортировка, пагинация",
)
async def list_videos(
    query: Optional[str] = Query(None, description="Поиск по названию и описанию"),
    user_id: Optional[int] = Query(None, description="Только видео этого канала"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    viewer_id = viewer.id if viewer else None
    view_filter = ViewFilter(
        owner_id=user_id,
        query=query,
        # свои черновики владелец видит на своём канале
        published_only=not (viewer_id is not None and user_id == viewer_id),
    )
    videos = await view_composer.compose_view_list(db, EntityKind.VIDEO, view_filter, page, viewer_id)
    return ApiResponse(status=200, data=videos, message="All videos fetched successfully")


@router.post(
    "/",
    response_model=ApiResponse[VideoRead],
    status_code=status.HTTP_201_CREATED,
    summary="Опубликовать видео",
)
async def publish_video(
    title: str = Form(..., description="Название"),
    description: str = Form(..., description="Описание"),
    duration: float = Form(0.0, ge=0, description="Длительность в секундах"),
    video_file: Optional[UploadFile] = File(None, description="Видеофайл"),
    thumbnail: Optional[UploadFile] = File(None, description="Превью"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    title, description = _clean(title), _clean(description)
    if not title or not description:
        raise InvalidArgument("Title and Description are required")
    if video_file is None or not video_file.filename:
        raise InvalidArgument("No video file uploaded")
    if thumbnail is None or not thumbnail.filename:
        raise InvalidArgument("Thumbnail not provided")

    video_url = await run_in_threadpool(
        upload_video_to_s3,
        video_file.file,
        video_file.filename,
        settings.AWS_S3_BUCKET_NAME,
    )
    try:
        thumbnail_url = await _upload_thumbnail(thumbnail)
    except (InvalidArgument, Internal):
        # видео без записи в БД никому не нужно
        await run_in_threadpool(delete_object_by_url, video_url, settings.AWS_S3_BUCKET_NAME)
        raise

    video = Video(
        owner_id=current_user.id,
        video_file=video_url,
        thumbnail=thumbnail_url,
        title=title,
        description=description,
        duration=duration,
        views=0,
        is_published=True,
    )
    db.add(video)
    await db.commit()
    await db.refresh(video)

    logger.info(f"Video {video.id} published by {current_user.id}")
    return ApiResponse(status=201, data=VideoRead.model_validate(video), message="Video uploaded successfully")


@router.get(
    "/{video_id}",
    response_model=ApiResponse[VideoView],
    summary="Видео с лайками, комментариями и подписчиками канала",
)
async def get_video(
    video_id: int = Path(..., description="ID видео"),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    viewer_id = viewer.id if viewer else None
    await view_composer.get_visible(db, video_id, EntityKind.VIDEO, viewer_id)
    await watch_history.record_view(db, video_id, viewer_id)
    view = await view_composer.compose_view(db, video_id, EntityKind.VIDEO, viewer_id)
    return ApiResponse(status=200, data=view, message="Video fetched successfully")


@router.patch(
    "/{video_id}",
    response_model=ApiResponse[VideoRead],
    summary="Обновить название, описание или превью",
)
async def update_video(
    video_id: int = Path(..., description="ID видео"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await load_owned(db, Video, video_id, current_user.id, "Video")

    title, description = _clean(title), _clean(description)
    if title is not None:
        video.title = title
    if description is not None:
        video.description = description
    if thumbnail is not None and thumbnail.filename:
        video.thumbnail = await _upload_thumbnail(thumbnail)

    db.add(video)
    await db.commit()
    await db.refresh(video)
    return ApiResponse(status=200, data=VideoRead.model_validate(video), message="Successfully updated video details")


@router.delete(
    "/{video_id}",
    response_model=ApiResponse[None],
    summary="Удалить видео вместе с комментариями и лайками",
)
async def delete_video(
    video_id: int = Path(..., description="ID видео"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await load_owned(db, Video, video_id, current_user.id, "Video")
    await cascade.delete_entity(db, video_id, EntityKind.VIDEO)
    return ApiResponse(status=200, data=None, message="The video has been deleted")


@router.patch(
    "/toggle/publish/{video_id}",
    response_model=ApiResponse[VideoRead],
    summary="Опубликовать / снять с публикации",
)
async def toggle_publish_status(
    video_id: int = Path(..., description="ID видео"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await load_owned(db, Video, video_id, current_user.id, "Video")
    video.is_published = not video.is_published
    db.add(video)
    await db.commit()
    await db.refresh(video)
    return ApiResponse(status=200, data=VideoRead.model_validate(video), message="Publish status updated successfully")
