from typing import Dict, Optional

from pydantic import BaseModel, Field

from schemas.user import OwnerProfile


class EngagementView(BaseModel):
    """Поля, которые добавляет к сущности сборщик представлений."""

    owner: Optional[OwnerProfile] = Field(None, description="Публичный профиль владельца")
    counts: Dict[str, int] = Field(default_factory=dict, description="Счётчики по видам отношений")
    viewer_flags: Dict[str, bool] = Field(
        default_factory=dict, description="Флаги относительно текущего пользователя"
    )
    is_owner: bool = Field(False, description="Текущий пользователь является владельцем")
