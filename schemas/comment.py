from datetime import datetime

from pydantic import BaseModel, Field

from schemas.view import EngagementView


class CommentCreate(BaseModel):
    content: str = Field(..., description="Текст комментария")


class CommentUpdate(CommentCreate):
    pass


class CommentRead(BaseModel):
    id: int
    video_id: int
    owner_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommentView(EngagementView, CommentRead):
    pass
