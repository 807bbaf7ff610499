from typing import Literal, Optional, Union
from datetime import datetime

from pydantic import BaseModel


class LikeRead(BaseModel):
    id: int
    liked_by_id: int
    target_id: int
    target_kind: str
    created_at: datetime

    class Config:
        from_attributes = True


class SubscriptionRead(BaseModel):
    id: int
    subscriber_id: int
    channel_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class ToggleResponse(BaseModel):
    state: Literal["created", "removed"]
    fact: Optional[Union[LikeRead, SubscriptionRead]] = None
