from datetime import date
from typing import Any, Optional

from loguru import logger

from filmorate.catalog.service import ReferenceCatalog
from filmorate.dao.base import EntityStore
from filmorate.exception import NotFoundException, ValidationException
from filmorate.films.likes import LikeIndex
from filmorate.films.schemas import FilmCreate, FilmData, FilmOut, FilmUpdate
from filmorate.locks import KeyedLocks
from filmorate.users.schemas import UserOut

CINEMA_BIRTHDAY = date(1895, 12, 28)
MAX_SYNOPSIS_LENGTH = 200


def check_title(title: Optional[str]) -> Optional[str]:
    if title is None or not title.strip():
        return "Название не может быть пустым"
    return None


def check_synopsis(synopsis: Optional[str]) -> Optional[str]:
    if synopsis is not None and len(synopsis) > MAX_SYNOPSIS_LENGTH:
        return f"Максимальная длина описания — {MAX_SYNOPSIS_LENGTH} символов"
    return None


def check_release_date(release_date: Optional[date]) -> Optional[str]:
    if release_date is None:
        return "Дата релиза обязательна"
    if release_date < CINEMA_BIRTHDAY:
        return "Дата релиза не может быть раньше 28 декабря 1895 года"
    return None


def check_runtime(runtime_minutes: Optional[int]) -> Optional[str]:
    if runtime_minutes is None or runtime_minutes <= 0:
        return "Продолжительность должна быть положительным числом"
    return None


FIELD_CHECKS = {
    "title": check_title,
    "synopsis": check_synopsis,
    "release_date": check_release_date,
    "runtime_minutes": check_runtime,
}


class FilmCatalogService:
    """Создание и частичное обновление фильмов, лайки и рейтинг популярности."""

    def __init__(
        self,
        films: EntityStore[FilmData],
        users: EntityStore[UserOut],
        likes: LikeIndex,
        catalog: ReferenceCatalog,
    ):
        self.films = films
        self.users = users
        self.likes = likes
        self.catalog = catalog
        self._film_locks = KeyedLocks()

    @staticmethod
    def _validate(values: dict[str, Any]) -> None:
        errors = {}
        for field, value in values.items():
            check = FIELD_CHECKS.get(field)
            reason = check(value) if check else None
            if reason:
                errors[field] = reason
        if errors:
            logger.warning(f"Фильм не прошел валидацию: {errors}")
            raise ValidationException(errors)

    def _resolve_references(self, payload: FilmCreate | FilmUpdate, fields: set[str]) -> dict[str, Any]:
        """Сверяет жанры и рейтинг со справочниками. Любой неизвестный id - NotFoundException."""
        resolved = {}
        if "genres" in fields:
            refs = payload.genres or []
            resolved["genres"] = self.catalog.resolve_genres(ref.id for ref in refs)
        if "maturity_rating" in fields:
            ref = payload.maturity_rating
            resolved["maturity_rating"] = self.catalog.maturity_rating(ref.id) if ref else None
        return resolved

    def _hydrate(self, film: FilmData, likers: frozenset[int]) -> FilmOut:
        return FilmOut.model_validate(
            {**film.model_dump(), "liked_by": sorted(likers), "popularity": len(likers)}
        )

    async def _require_film(self, film_id: int) -> FilmData:
        film = await self.films.find_by_id(film_id)
        if film is None:
            raise NotFoundException("Фильм", film_id)
        return film

    async def _require_user(self, user_id: int) -> None:
        if not await self.users.exists_by_id(user_id):
            raise NotFoundException("Пользователь", user_id)

    async def create(self, draft: FilmCreate) -> FilmOut:
        logger.info(
            f"Создание фильма: title={draft.title!r}, release_date={draft.release_date}, "
            f"runtime={draft.runtime_minutes}, genres={draft.genres}"
        )
        self._validate({field: getattr(draft, field) for field in FIELD_CHECKS})
        references = self._resolve_references(draft, {"genres", "maturity_rating"})

        film = FilmData(
            title=draft.title,
            synopsis=draft.synopsis,
            release_date=draft.release_date,
            runtime_minutes=draft.runtime_minutes,
            **references,
        )
        created = await self.films.create(film)
        logger.info(f"Фильм создан с ID: {created.id}")
        return self._hydrate(created, frozenset())

    async def update(self, film_id: int, patch: FilmUpdate) -> FilmOut:
        fields = set(patch.model_fields_set)
        logger.info(f"Обновление фильма {film_id}, поля: {sorted(fields)}")

        async with self._film_locks.hold(film_id):
            existing = await self._require_film(film_id)

            # Сначала проверяем всё, потом пишем: при ошибке фильм в хранилище не меняется
            changes = {field: getattr(patch, field) for field in fields if field in FIELD_CHECKS}
            self._validate(changes)
            changes.update(self._resolve_references(patch, fields))

            updated = await self.films.update(existing.model_copy(update=changes))

        return self._hydrate(updated, await self.likes.likers_of(film_id))

    async def find_by_id(self, film_id: int) -> FilmOut:
        film = await self._require_film(film_id)
        return self._hydrate(film, await self.likes.likers_of(film_id))

    async def find_all(self) -> list[FilmOut]:
        films = await self.films.find_all()
        likes = await self.likes.snapshot()
        return [self._hydrate(film, likes.get(film.id, frozenset())) for film in films]

    async def add_like(self, film_id: int, user_id: int) -> None:
        await self._require_film(film_id)
        await self._require_user(user_id)
        await self.likes.add_like(film_id, user_id)

    async def remove_like(self, film_id: int, user_id: int) -> None:
        await self._require_film(film_id)
        await self._require_user(user_id)
        await self.likes.remove_like(film_id, user_id)

    async def popular_films(self, count: int) -> list[FilmOut]:
        """
        Фильмы по убыванию числа лайков, при равенстве - по убыванию id.
        Все счётчики берутся из одного среза LikeIndex.
        """
        if count <= 0:
            raise ValidationException({"count": "Количество фильмов должно быть положительным числом"})

        films = await self.films.find_all()
        likes = await self.likes.snapshot()
        ranked = sorted(films, key=lambda film: (-len(likes.get(film.id, ())), -film.id))
        logger.info(f"Запрошено {count} популярных фильмов, всего в каталоге {len(films)}")
        return [self._hydrate(film, likes.get(film.id, frozenset())) for film in ranked[:count]]
