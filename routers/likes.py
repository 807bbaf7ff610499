from typing import List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.kinds import EntityKind, TargetKind
from core.security import get_current_user
from models.user import User
from schemas.like import LikeRead, ToggleResponse
from schemas.response import ApiResponse
from schemas.video import VideoView
from services import relationship_store, toggle_engine, view_composer
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params

router = APIRouter(prefix="/likes", tags=["likes"])

_MESSAGES = {
    TargetKind.VIDEO: ("Video liked successfully", "You have unliked the video"),
    TargetKind.COMMENT: ("Comment liked successfully", "Unliked the comment"),
    TargetKind.TWEET: ("Tweet liked successfully", "Unliked the tweet"),
}


async def _toggle_like(
    db: AsyncSession, response: Response, user: User, target_id: int, kind: TargetKind
) -> ApiResponse[ToggleResponse]:
    result = await toggle_engine.toggle(db, user.id, target_id, kind)
    liked_message, unliked_message = _MESSAGES[kind]
    if result.state == toggle_engine.CREATED:
        response.status_code = status.HTTP_201_CREATED
        return ApiResponse(
            status=201,
            data=ToggleResponse(state=result.state, fact=LikeRead.model_validate(result.fact)),
            message=liked_message,
        )
    return ApiResponse(status=200, data=ToggleResponse(state=result.state), message=unliked_message)


@router.post(
    "/toggle/v/{video_id}",
    response_model=ApiResponse[ToggleResponse],
    summary="Поставить или убрать лайк видео",
)
async def toggle_video_like(
    response: Response,
    video_id: int = Path(..., description="ID видео"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _toggle_like(db, response, current_user, video_id, TargetKind.VIDEO)


@router.post(
    "/toggle/c/{comment_id}",
    response_model=ApiResponse[ToggleResponse],
    summary="Поставить или убрать лайк комментария",
)
async def toggle_comment_like(
    response: Response,
    comment_id: int = Path(..., description="ID комментария"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _toggle_like(db, response, current_user, comment_id, TargetKind.COMMENT)


@router.post(
    "/toggle/t/{tweet_id}",
    response_model=ApiResponse[ToggleResponse],
    summary="Поставить или убрать лайк твита",
)
async def toggle_tweet_like(
    response: Response,
    tweet_id: int = Path(..., description="ID твита"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _toggle_like(db, response, current_user, tweet_id, TargetKind.TWEET)


@router.get(
    "/videos",
    response_model=ApiResponse[List[VideoView]],
    summary="Видео, которые я лайкнул",
)
async def get_liked_videos(
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    liked_ids = await relationship_store.target_ids_for_actor(db, current_user.id, TargetKind.VIDEO)
    videos = await view_composer.compose_view_list(
        db, EntityKind.VIDEO, ViewFilter(ids=liked_ids, keep_ids_order=True), page, current_user.id
    )
    return ApiResponse(status=200, data=videos, message="Liked videos fetched successfully")
