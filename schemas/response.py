from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Единый конверт ответа: {status, data, message}."""

    status: int = Field(200, description="HTTP-статус операции")
    data: Optional[T] = Field(None, description="Полезная нагрузка")
    message: str = Field("", description="Описание результата")
