from typing import Any, Type

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound, Unauthorized


def assert_owner(principal_id: int, entity: Any) -> None:
    """Пропускает только владельца сущности. Чистое сравнение, без побочных эффектов."""
    if principal_id is None or principal_id != entity.owner_id:
        raise Unauthorized("You are not authorized to perform this action")


async def get_or_404(db: AsyncSession, model: Type, entity_id: int, label: str) -> Any:
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFound(f"{label} not found")
    return entity


async def load_owned(
    db: AsyncSession, model: Type, entity_id: int, principal_id: int, label: str
) -> Any:
    """Загрузить сущность для изменения: 404, если её нет, 403, если чужая."""
    entity = await get_or_404(db, model, entity_id, label)
    assert_owner(principal_id, entity)
    return entity
