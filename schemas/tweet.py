from datetime import datetime

from pydantic import BaseModel, Field

from schemas.view import EngagementView


class TweetCreate(BaseModel):
    content: str = Field(..., description="Текст твита")


class TweetUpdate(TweetCreate):
    pass


class TweetRead(BaseModel):
    id: int
    owner_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TweetView(EngagementView, TweetRead):
    pass
