from typing import List
from datetime import datetime

from pydantic import BaseModel, Field

from schemas.video import VideoView
from schemas.view import EngagementView


class PlaylistCreate(BaseModel):
    name: str = Field(..., max_length=255, description="Название плейлиста")
    description: str = Field(..., description="Описание")


class PlaylistUpdate(PlaylistCreate):
    pass


class PlaylistRead(BaseModel):
    id: int
    owner_id: int
    name: str
    description: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PlaylistView(EngagementView, PlaylistRead):
    videos: List[VideoView] = Field(default_factory=list, description="Видимые видео плейлиста")
