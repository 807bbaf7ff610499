from typing import List

from pydantic import BaseModel, Field

from schemas.user import ChannelView


class SubscribersPage(BaseModel):
    subscribers: List[ChannelView] = Field(default_factory=list)
    subscribers_count: int = 0


class SubscribedChannelsPage(BaseModel):
    channels: List[ChannelView] = Field(default_factory=list)
    channels_count: int = 0
