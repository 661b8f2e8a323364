import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict

from loguru import logger


class LikeIndex(ABC):
    """
    Связь "пользователь поставил лайк фильму".
    Добавление и удаление идемпотентны, существование фильма и пользователя не проверяется.
    Изменения выполняются под одной блокировкой на всё отношение.
    """

    def __init__(self):
        self._lock = asyncio.Lock()

    async def add_like(self, film_id: int, user_id: int) -> None:
        async with self._lock:
            added = await self._insert(film_id, user_id)
        if added:
            logger.info(f"Лайк добавлен: film_id={film_id}, user_id={user_id}")
        else:
            logger.info(f"Лайк уже существует: film_id={film_id}, user_id={user_id}")

    async def remove_like(self, film_id: int, user_id: int) -> None:
        async with self._lock:
            removed = await self._delete(film_id, user_id)
        if removed:
            logger.info(f"Лайк удален: film_id={film_id}, user_id={user_id}")

    async def like_count(self, film_id: int) -> int:
        return len(await self.likers_of(film_id))

    @abstractmethod
    async def _insert(self, film_id: int, user_id: int) -> bool:
        """True, если пары ещё не было."""

    @abstractmethod
    async def _delete(self, film_id: int, user_id: int) -> bool:
        """True, если пара была."""

    @abstractmethod
    async def likers_of(self, film_id: int) -> frozenset[int]: ...

    @abstractmethod
    async def snapshot(self) -> dict[int, frozenset[int]]:
        """Все лайки на один момент времени: {film_id: user_ids}."""

    @abstractmethod
    async def total_likes(self) -> int: ...


class InMemoryLikeIndex(LikeIndex):

    def __init__(self):
        super().__init__()
        self._likes: dict[int, set[int]] = defaultdict(set)

    async def _insert(self, film_id: int, user_id: int) -> bool:
        likers = self._likes[film_id]
        if user_id in likers:
            return False
        likers.add(user_id)
        return True

    async def _delete(self, film_id: int, user_id: int) -> bool:
        likers = self._likes.get(film_id)
        if not likers or user_id not in likers:
            return False
        likers.discard(user_id)
        if not likers:
            del self._likes[film_id]
        return True

    async def likers_of(self, film_id: int) -> frozenset[int]:
        return frozenset(self._likes.get(film_id, ()))

    async def snapshot(self) -> dict[int, frozenset[int]]:
        async with self._lock:
            return {film_id: frozenset(users) for film_id, users in self._likes.items()}

    async def total_likes(self) -> int:
        return sum(len(users) for users in self._likes.values())
