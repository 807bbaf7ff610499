from fastapi import Query

from core.config import settings
from services.view_composer import PageRequest


def page_params(
    page: int = Query(1, description="Номер страницы, с 1"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, description="Размер страницы"),
    sort_by: str = Query("created_at", description="Поле сортировки"),
    sort_type: str = Query("desc", description="asc / desc (или 1 / -1)"),
) -> PageRequest:
    """Параметры страницы из query; диапазоны проверяет сборщик представлений."""
    return PageRequest(page=page, page_size=limit, sort_by=sort_by, sort_type=sort_type)
