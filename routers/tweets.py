from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import InvalidArgument
from core.kinds import EntityKind
from core.security import get_current_user, get_optional_user
from models.tweet import Tweet
from models.user import User
from schemas.response import ApiResponse
from schemas.tweet import TweetCreate, TweetRead, TweetUpdate, TweetView
from services import cascade, view_composer
from services.ownership import get_or_404, load_owned
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params

router = APIRouter(prefix="/tweets", tags=["tweets"])


@router.post(
    "/",
    response_model=ApiResponse[TweetRead],
    status_code=status.HTTP_201_CREATED,
    summary="Написать твит",
)
async def create_tweet(
    payload: TweetCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = payload.content.strip()
    if not content:
        raise InvalidArgument("Content field missing")

    tweet = Tweet(owner_id=current_user.id, content=content)
    db.add(tweet)
    await db.commit()
    await db.refresh(tweet)
    return ApiResponse(status=201, data=TweetRead.model_validate(tweet), message="Successfully created a tweet")


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[List[TweetView]],
    summary="Твиты пользователя",
)
async def get_user_tweets(
    user_id: int = Path(..., description="ID пользователя"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    await get_or_404(db, User, user_id, "User")
    tweets = await view_composer.compose_view_list(
        db, EntityKind.TWEET, ViewFilter(owner_id=user_id), page, viewer.id if viewer else None
    )
    return ApiResponse(status=200, data=tweets, message="All tweets fetched successfully")


@router.get(
    "/{tweet_id}",
    response_model=ApiResponse[TweetView],
    summary="Твит с лайками",
)
async def get_tweet(
    tweet_id: int = Path(..., description="ID твита"),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    view = await view_composer.compose_view(db, tweet_id, EntityKind.TWEET, viewer.id if viewer else None)
    return ApiResponse(status=200, data=view, message="Tweet fetched")


@router.patch(
    "/{tweet_id}",
    response_model=ApiResponse[TweetRead],
    summary="Изменить свой твит",
)
async def update_tweet(
    payload: TweetUpdate,
    tweet_id: int = Path(..., description="ID твита"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = payload.content.strip()
    if not content:
        raise InvalidArgument("Content field missing")
    tweet = await load_owned(db, Tweet, tweet_id, current_user.id, "Tweet")

    tweet.content = content
    db.add(tweet)
    await db.commit()
    await db.refresh(tweet)
    return ApiResponse(status=200, data=TweetRead.model_validate(tweet), message="Tweet has been updated successfully")


@router.delete(
    "/{tweet_id}",
    response_model=ApiResponse[None],
    summary="Удалить свой твит",
)
async def delete_tweet(
    tweet_id: int = Path(..., description="ID твита"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await load_owned(db, Tweet, tweet_id, current_user.id, "Tweet")
    await cascade.delete_entity(db, tweet_id, EntityKind.TWEET)
    return ApiResponse(status=200, data=None, message="The tweet was deleted successfully")
