from typing import Iterable

from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from filmorate.catalog.models import Genre, MaturityRating
from filmorate.catalog.schemas import GenreOut, MaturityRatingOut
from filmorate.exception import NotFoundException

DEFAULT_GENRES = (
    GenreOut(id=1, name="Комедия"),
    GenreOut(id=2, name="Драма"),
    GenreOut(id=3, name="Мультфильм"),
    GenreOut(id=4, name="Триллер"),
    GenreOut(id=5, name="Документальный"),
    GenreOut(id=6, name="Боевик"),
)

DEFAULT_MATURITY_RATINGS = (
    MaturityRatingOut(id=1, name="G", description="Нет возрастных ограничений"),
    MaturityRatingOut(id=2, name="PG", description="Рекомендуется присутствие родителей"),
    MaturityRatingOut(id=3, name="PG-13", description="Детям до 13 лет просмотр не желателен"),
    MaturityRatingOut(id=4, name="R", description="Лицам до 17 лет обязательно присутствие взрослого"),
    MaturityRatingOut(id=5, name="NC-17", description="Лицам до 18 лет просмотр запрещен"),
)


class ReferenceCatalog:
    """
    Закрытые справочники жанров и рейтингов MPA.
    Содержимое задаётся при создании и дальше не меняется.
    """

    def __init__(self, genres: Iterable[GenreOut], maturity_ratings: Iterable[MaturityRatingOut]):
        self._genres = {genre.id: genre for genre in genres}
        self._ratings = {rating.id: rating for rating in maturity_ratings}

    @classmethod
    def default(cls) -> "ReferenceCatalog":
        return cls(DEFAULT_GENRES, DEFAULT_MATURITY_RATINGS)

    def genre(self, genre_id: int) -> GenreOut:
        try:
            return self._genres[genre_id]
        except KeyError:
            raise NotFoundException("Жанр", genre_id) from None

    def maturity_rating(self, rating_id: int) -> MaturityRatingOut:
        try:
            return self._ratings[rating_id]
        except KeyError:
            raise NotFoundException("Рейтинг MPA", rating_id) from None

    def all_genres(self) -> list[GenreOut]:
        return [self._genres[key] for key in sorted(self._genres)]

    def all_maturity_ratings(self) -> list[MaturityRatingOut]:
        return [self._ratings[key] for key in sorted(self._ratings)]

    def resolve_genres(self, genre_ids: Iterable[int]) -> list[GenreOut]:
        """Проверяет все id разом: либо все найдены, либо NotFoundException по первому отсутствующему."""
        return [self.genre(genre_id) for genre_id in sorted(set(genre_ids))]


async def seed_reference_catalog(session_maker: async_sessionmaker[AsyncSession]) -> None:
    """Заполняет таблицы справочников, если они пустые."""
    async with session_maker() as session:
        async with session.begin():
            if not await session.scalar(select(func.count()).select_from(Genre)):
                session.add_all(Genre(id=g.id, name=g.name) for g in DEFAULT_GENRES)
                logger.info(f"Добавлено жанров: {len(DEFAULT_GENRES)}")
            if not await session.scalar(select(func.count()).select_from(MaturityRating)):
                session.add_all(
                    MaturityRating(id=r.id, name=r.name, description=r.description)
                    for r in DEFAULT_MATURITY_RATINGS
                )
                logger.info(f"Добавлено рейтингов MPA: {len(DEFAULT_MATURITY_RATINGS)}")


async def load_reference_catalog(session_maker: async_sessionmaker[AsyncSession]) -> ReferenceCatalog:
    async with session_maker() as session:
        genres = (await session.execute(select(Genre).order_by(Genre.id))).scalars().all()
        ratings = (await session.execute(select(MaturityRating).order_by(MaturityRating.id))).scalars().all()
    logger.info(f"Справочники загружены: жанров {len(genres)}, рейтингов {len(ratings)}")
    return ReferenceCatalog(
        (GenreOut.model_validate(g) for g in genres),
        (MaturityRatingOut.model_validate(r) for r in ratings),
    )
