from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import Unauthorized
from core.kinds import EntityKind, TargetKind
from core.security import get_current_user
from models.user import User
from schemas.like import SubscriptionRead, ToggleResponse
from schemas.response import ApiResponse
from schemas.subscription import SubscribedChannelsPage, SubscribersPage
from services import relationship_store, toggle_engine, view_composer
from services.view_composer import PageRequest, ViewFilter
from utils.pagination import page_params

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post(
    "/c/{channel_id}",
    response_model=ApiResponse[ToggleResponse],
    summary="Подписаться на канал или отписаться",
)
async def toggle_subscription(
    response: Response,
    channel_id: int = Path(..., description="ID канала (пользователя)"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = await toggle_engine.toggle(db, current_user.id, channel_id, TargetKind.CHANNEL)
    if result.state == toggle_engine.CREATED:
        response.status_code = status.HTTP_201_CREATED
        return ApiResponse(
            status=201,
            data=ToggleResponse(state=result.state, fact=SubscriptionRead.model_validate(result.fact)),
            message="Successfully subscribed to the channel",
        )
    return ApiResponse(
        status=200,
        data=ToggleResponse(state=result.state),
        message="You have been unsubscribed from this channel",
    )


@router.get(
    "/c/{subscriber_id}",
    response_model=ApiResponse[SubscribedChannelsPage],
    summary="Каналы, на которые я подписан",
)
async def get_subscribed_channels(
    subscriber_id: int = Path(..., description="ID подписчика"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.id != subscriber_id:
        raise Unauthorized("Only the subscriber can view their subscriptions")

    channel_ids = await relationship_store.target_ids_for_actor(db, subscriber_id, TargetKind.CHANNEL)
    view_filter = ViewFilter(ids=channel_ids, keep_ids_order=True)
    channels = await view_composer.compose_view_list(
        db, EntityKind.CHANNEL, view_filter, page, current_user.id
    )
    return ApiResponse(
        status=200,
        data=SubscribedChannelsPage(
            channels=channels,
            channels_count=await view_composer.count_matching(db, EntityKind.CHANNEL, view_filter),
        ),
        message="Channels subscribed fetched successfully",
    )


@router.get(
    "/u/{channel_id}",
    response_model=ApiResponse[SubscribersPage],
    summary="Подписчики моего канала",
)
async def get_channel_subscribers(
    channel_id: int = Path(..., description="ID канала"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.id != channel_id:
        raise Unauthorized("Only the owner can view the channel subscribers")

    subscriber_ids = await relationship_store.actor_ids_for_target(db, channel_id, TargetKind.CHANNEL)
    view_filter = ViewFilter(ids=subscriber_ids, keep_ids_order=True)
    subscribers = await view_composer.compose_view_list(
        db, EntityKind.CHANNEL, view_filter, page, current_user.id
    )
    return ApiResponse(
        status=200,
        data=SubscribersPage(
            subscribers=subscribers,
            subscribers_count=await view_composer.count_matching(db, EntityKind.CHANNEL, view_filter),
        ),
        message="All subscribers fetched",
    )
