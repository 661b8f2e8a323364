from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

from filmorate.catalog.schemas import CatalogRef, GenreOut, MaturityRatingOut


class FilmCreate(BaseModel):
    # Обязательность полей проверяет сервис, чтобы вернуть ошибку по каждому полю
    title: Optional[str] = None
    synopsis: Optional[str] = None
    release_date: Optional[date] = None
    runtime_minutes: Optional[int] = None
    maturity_rating: Optional[CatalogRef] = None
    genres: Optional[list[CatalogRef]] = None


class FilmUpdate(BaseModel):
    """Частичное обновление: учитываются только переданные поля (model_fields_set)."""
    title: Optional[str] = None
    synopsis: Optional[str] = None
    release_date: Optional[date] = None
    runtime_minutes: Optional[int] = None
    maturity_rating: Optional[CatalogRef] = None
    genres: Optional[list[CatalogRef]] = None


class FilmData(BaseModel):
    """Фильм в том виде, в котором он лежит в хранилище (без лайков)."""
    id: Optional[int] = None
    title: str
    synopsis: Optional[str] = None
    release_date: date
    runtime_minutes: int
    maturity_rating: Optional[MaturityRatingOut] = None
    genres: list[GenreOut] = []

    model_config = ConfigDict(from_attributes=True)


class FilmOut(FilmData):
    id: int
    liked_by: list[int] = []
    popularity: int = 0
