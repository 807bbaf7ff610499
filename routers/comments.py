from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import InvalidArgument
from core.kinds import EntityKind
from core.security import get_current_user, get_optional_user
from models.comment import Comment
from models.user import User
from schemas.comment import CommentCreate, CommentRead, CommentUpdate, CommentView
from schemas.response import ApiResponse
from services import cascade, view_composer
from services.ownership import load_owned
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get(
    "/{video_id}",
    response_model=ApiResponse[List[CommentView]],
    summary="Комментарии к видео с лайками",
)
async def get_video_comments(
    video_id: int = Path(..., description="ID видео"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    viewer_id = viewer.id if viewer else None
    await view_composer.get_visible(db, video_id, EntityKind.VIDEO, viewer_id)
    comments = await view_composer.compose_view_list(
        db, EntityKind.COMMENT, ViewFilter(video_id=video_id), page, viewer_id
    )
    return ApiResponse(status=200, data=comments, message="Comments fetched successfully")


@router.post(
    "/{video_id}",
    response_model=ApiResponse[CommentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Оставить комментарий",
)
async def add_comment(
    payload: CommentCreate,
    video_id: int = Path(..., description="ID видео"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = payload.content.strip()
    if not content:
        raise InvalidArgument("Provide the comment")
    await view_composer.get_visible(db, video_id, EntityKind.VIDEO, current_user.id)

    comment = Comment(content=content, video_id=video_id, owner_id=current_user.id)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return ApiResponse(
        status=201,
        data=CommentRead.model_validate(comment),
        message="The comment was added successfully",
    )


@router.patch(
    "/c/{comment_id}",
    response_model=ApiResponse[CommentRead],
    summary="Изменить свой комментарий",
)
async def update_comment(
    payload: CommentUpdate,
    comment_id: int = Path(..., description="ID комментария"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = payload.content.strip()
    if not content:
        raise InvalidArgument("Please provide the updated comment")
    comment = await load_owned(db, Comment, comment_id, current_user.id, "Comment")

    comment.content = content
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return ApiResponse(status=200, data=CommentRead.model_validate(comment), message="Comment has been updated")


@router.delete(
    "/c/{comment_id}",
    response_model=ApiResponse[None],
    summary="Удалить свой комментарий",
)
async def delete_comment(
    comment_id: int = Path(..., description="ID комментария"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await load_owned(db, Comment, comment_id, current_user.id, "Comment")
    await cascade.delete_entity(db, comment_id, EntityKind.COMMENT)
    return ApiResponse(status=200, data=None, message="Comment deleted successfully")
