from typing import Dict, Optional
from datetime import datetime

from pydantic import BaseModel, Field


class OwnerProfile(BaseModel):
    """Публичная часть профиля владельца."""

    id: int = Field(..., description="PK пользователя")
    username: str = Field(..., description="Уникальный handle")
    full_name: str = Field(..., description="Отображаемое имя")
    avatar: Optional[str] = Field(None, description="URL аватара")

    class Config:
        from_attributes = True


class UserRead(OwnerProfile):
    email: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ChannelView(OwnerProfile):
    cover_image: Optional[str] = None
    created_at: datetime
    counts: Dict[str, int] = Field(default_factory=dict, description="subscription, subscribed_to, videos")
    viewer_flags: Dict[str, bool] = Field(default_factory=dict, description="subscription")
    is_owner: bool = False
