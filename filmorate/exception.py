from typing import Any

from fastapi import HTTPException, status


class FilmorateException(HTTPException):  # <-- наследуемся от HTTPException,
    status_code = 500  # <-- задаем значения по умолчанию
    detail: Any = ""

    def __init__(self, detail: Any = None):
        super().__init__(status_code=self.status_code, detail=self.detail if detail is None else detail)


class ValidationException(FilmorateException):
    """Нарушены ограничения полей. errors: {поле: причина}."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__(detail=self.errors)


class NotFoundException(FilmorateException):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(detail=f"{entity} с ID {entity_id} не найден")


class IntegrityException(FilmorateException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Нарушение ограничений базы данных"


class InternalException(FilmorateException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Внутренняя ошибка сервера"
