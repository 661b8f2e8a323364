from loguru import logger
from sqlalchemy import select, func, insert, delete as sa_delete, update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from filmorate.dao.base import BaseDAO, commit_or_raise
from filmorate.database import connection
from filmorate.exception import IntegrityException, NotFoundException
from filmorate.films.likes import LikeIndex
from filmorate.films.models import Film, FilmLike, film_genres
from filmorate.films.schemas import FilmData


class FilmDAO(BaseDAO[FilmData]):
    model = Film
    schema = FilmData
    entity_name = "Фильм"

    def _values(self, entity: FilmData) -> dict:
        return {
            "title": entity.title,
            "synopsis": entity.synopsis,
            "release_date": entity.release_date,
            "runtime_minutes": entity.runtime_minutes,
            "maturity_rating_id": entity.maturity_rating.id if entity.maturity_rating else None,
        }

    @staticmethod
    async def _save_genres(session: AsyncSession, film_id: int, entity: FilmData) -> None:
        genre_ids = sorted({genre.id for genre in entity.genres})
        if genre_ids:
            await session.execute(
                insert(film_genres),
                [{"film_id": film_id, "genre_id": genre_id} for genre_id in genre_ids],
            )

    @connection
    async def create(self, entity: FilmData, session: AsyncSession) -> FilmData:
        new_film = Film(**self._values(entity))
        session.add(new_film)
        await session.flush()
        await self._save_genres(session, new_film.id, entity)
        await commit_or_raise(session)
        return self._to_entity(await self._get(session, new_film.id))

    @connection
    async def update(self, entity: FilmData, session: AsyncSession) -> FilmData:
        # Строка фильма и набор жанров меняются в одной транзакции
        result = await session.execute(
            sa_update(Film).where(Film.id == entity.id).values(**self._values(entity))
        )
        if not result.rowcount:
            await session.rollback()
            raise NotFoundException(self.entity_name, entity.id)
        await session.execute(sa_delete(film_genres).where(film_genres.c.film_id == entity.id))
        await self._save_genres(session, entity.id, entity)
        await commit_or_raise(session)
        return self._to_entity(await self._get(session, entity.id))


class LikeDAO(LikeIndex):
    """Лайки в таблице film_likes."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__()
        self.session_maker = session_maker

    @staticmethod
    async def _has_like(session: AsyncSession, film_id: int, user_id: int) -> bool:
        found = await session.scalar(
            select(func.count()).select_from(FilmLike).filter_by(film_id=film_id, user_id=user_id)
        )
        return bool(found)

    @connection
    async def _insert(self, film_id: int, user_id: int, session: AsyncSession) -> bool:
        if await self._has_like(session, film_id, user_id):
            return False
        session.add(FilmLike(film_id=film_id, user_id=user_id))
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            # Ту же пару успел вставить другой процесс
            if await self._has_like(session, film_id, user_id):
                logger.info(f"Лайк вставлен параллельно: film_id={film_id}, user_id={user_id}")
                return False
            logger.warning(f"База отклонила лайк: {e.orig}")
            raise IntegrityException() from e
        return True

    @connection
    async def _delete(self, film_id: int, user_id: int, session: AsyncSession) -> bool:
        result = await session.execute(sa_delete(FilmLike).filter_by(film_id=film_id, user_id=user_id))
        await commit_or_raise(session)
        return bool(result.rowcount)

    @connection
    async def likers_of(self, film_id: int, session: AsyncSession) -> frozenset[int]:
        result = await session.execute(select(FilmLike.user_id).where(FilmLike.film_id == film_id))
        return frozenset(result.scalars().all())

    @connection
    async def snapshot(self, session: AsyncSession) -> dict[int, frozenset[int]]:
        # Один запрос - один согласованный срез
        result = await session.execute(select(FilmLike.film_id, FilmLike.user_id))
        likes: dict[int, set[int]] = {}
        for film_id, user_id in result.all():
            likes.setdefault(film_id, set()).add(user_id)
        return {film_id: frozenset(users) for film_id, users in likes.items()}

    @connection
    async def total_likes(self, session: AsyncSession) -> int:
        return await session.scalar(select(func.count()).select_from(FilmLike)) or 0
