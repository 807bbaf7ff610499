"""Типизированные ошибки ядра.

Каждая ошибка несёт HTTP-статус; глобальный обработчик
(core/error_handlers.py) превращает её в ответ {status, message}.
"""


class AppError(Exception):
    """Базовая ошибка приложения."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> dict:
        return {"status": self.status_code, "message": self.message}


class InvalidArgument(AppError):
    """Некорректные id, поля, параметры пагинации или сортировки."""
    status_code = 400


class Unauthorized(AppError):
    """Пользователь не владелец сущности, которую пытается изменить."""
    status_code = 403


class NotFound(AppError):
    """Сущность не существует или не видна пользователю."""
    status_code = 404


class Conflict(AppError):
    """Нарушение уникальности (например, видео уже в плейлисте)."""
    status_code = 409


class Internal(AppError):
    """Сбой хранилища или нарушенное постусловие."""
    status_code = 500


class Unavailable(AppError):
    """Хранилище не ответило за отведённое время."""
    status_code = 503
