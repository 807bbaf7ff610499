from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.database import get_db
from core.errors import Conflict, InvalidArgument, NotFound
from core.kinds import EntityKind
from core.security import get_current_user, get_optional_user
from models.user import User
from schemas.response import ApiResponse
from schemas.user import ChannelView, UserRead
from schemas.video import VideoView
from services import view_composer, watch_history
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params
from utils.s3 import delete_object_by_url, upload_avatar_to_s3, upload_cover_image_to_s3

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=ApiResponse[UserRead],
    summary="Получить свой профиль"
)
async def read_my_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(status=200, data=UserRead.model_validate(current_user), message="User fetched successfully")


@router.patch(
    "/me",
    response_model=ApiResponse[UserRead],
    summary="Обновить свой профиль"
)
async def update_my_profile(
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    def _clean_value(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    full_name, email = _clean_value(full_name), _clean_value(email)
    if full_name is None and email is None:
        raise InvalidArgument("Provide full_name or email")
    if full_name is not None:
        current_user.full_name = full_name
    if email is not None:
        current_user.email = email

    db.add(current_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Email is already taken")
    await db.refresh(current_user)
    return ApiResponse(status=200, data=UserRead.model_validate(current_user), message="Account details updated")


async def _replace_image(db: AsyncSession, user: User, field: str, upload: UploadFile, uploader) -> User:
    """Грузит новую картинку профиля, сохраняет URL и удаляет старый объект."""
    if not upload.filename:
        raise InvalidArgument(f"{field} file is missing")
    try:
        url = await run_in_threadpool(uploader, upload.file, upload.filename, settings.AWS_S3_BUCKET_NAME)
    except ValueError as ve:
        raise InvalidArgument(str(ve))

    old_url = getattr(user, field)
    setattr(user, field, url)
    db.add(user)
    await db.commit()
    await db.refresh(user)

    await run_in_threadpool(delete_object_by_url, old_url, settings.AWS_S3_BUCKET_NAME)
    return user


@router.patch(
    "/avatar",
    response_model=ApiResponse[UserRead],
    summary="Обновить аватар"
)
async def update_avatar(
    avatar: UploadFile = File(..., description="Новый аватар"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await _replace_image(db, current_user, "avatar", avatar, upload_avatar_to_s3)
    return ApiResponse(status=200, data=UserRead.model_validate(user), message="Avatar image updated successfully")


@router.patch(
    "/cover-image",
    response_model=ApiResponse[UserRead],
    summary="Обновить обложку канала"
)
async def update_cover_image(
    cover_image: UploadFile = File(..., description="Новая обложка"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await _replace_image(db, current_user, "cover_image", cover_image, upload_cover_image_to_s3)
    return ApiResponse(status=200, data=UserRead.model_validate(user), message="Cover image updated successfully")


@router.get(
    "/c/{username}",
    response_model=ApiResponse[ChannelView],
    summary="Профиль канала по username"
)
async def get_channel_profile(
    username: str = Path(..., description="Username канала"),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    result = await db.execute(select(User.id).where(User.username == username.strip()))
    channel_id = result.scalar_one_or_none()
    if channel_id is None:
        raise NotFound("Channel does not exist")

    view = await view_composer.compose_view(db, channel_id, EntityKind.CHANNEL, viewer.id if viewer else None)
    return ApiResponse(status=200, data=view, message="Channel fetched successfully")


@router.get(
    "/history",
    response_model=ApiResponse[List[VideoView]],
    summary="История просмотров"
)
async def get_watch_history(
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video_ids = await watch_history.history_video_ids(db, current_user.id)
    videos = await view_composer.compose_view_list(
        db, EntityKind.VIDEO, ViewFilter(ids=video_ids, keep_ids_order=True), page, current_user.id
    )
    return ApiResponse(status=200, data=videos, message="Watch history fetched successfully")
