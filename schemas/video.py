from datetime import datetime

from pydantic import BaseModel, Field

from schemas.view import EngagementView


class VideoRead(BaseModel):
    id: int = Field(..., description="PK видео")
    owner_id: int
    video_file: str = Field(..., description="URL видеофайла")
    thumbnail: str = Field(..., description="URL превью")
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VideoView(EngagementView, VideoRead):
    """Видео + владелец, лайки, комментарии, подписчики канала."""
