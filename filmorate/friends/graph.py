import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol

from loguru import logger

from filmorate.exception import ValidationException
from filmorate.friends.models import FriendStatus


class EdgeSet(Protocol):
    """Доступ к рёбрам внутри одной транзакции графа."""

    async def get(self, user_id: int, friend_id: int) -> Optional[FriendStatus]: ...

    async def put(self, user_id: int, friend_id: int, status: FriendStatus) -> None: ...

    async def remove(self, user_id: int, friend_id: int) -> bool: ...


class FriendshipGraph(ABC):
    """
    Дружба как направленный граф со статусом на каждом ребре.

    request(a, b) создаёт ребро a -> b в PENDING; если уже есть b -> a,
    оба ребра становятся CONFIRMED. withdraw(a, b) удаляет a -> b, а
    подтверждённое обратное ребро возвращает в PENDING.

    Граф не знает о пользователях: существование id проверяет сервис.
    """

    def __init__(self):
        self._lock = asyncio.Lock()

    @abstractmethod
    def _edges(self) -> "AsyncIterator[EdgeSet]":
        """Асинхронный контекстный менеджер: одна атомарная группа изменений."""

    async def request(self, user_id: int, friend_id: int) -> FriendStatus:
        if user_id == friend_id:
            raise ValidationException({"friend_id": "Пользователь не может добавить себя в друзья"})

        async with self._lock, self._edges() as edges:
            if await edges.get(user_id, friend_id) is None:
                await edges.put(user_id, friend_id, FriendStatus.PENDING)
            if await edges.get(friend_id, user_id) is not None:
                await edges.put(user_id, friend_id, FriendStatus.CONFIRMED)
                await edges.put(friend_id, user_id, FriendStatus.CONFIRMED)
                status = FriendStatus.CONFIRMED
            else:
                status = FriendStatus.PENDING

        logger.info(f"Заявка в друзья {user_id} -> {friend_id}: {status.value}")
        return status

    async def withdraw(self, user_id: int, friend_id: int) -> None:
        async with self._lock, self._edges() as edges:
            removed = await edges.remove(user_id, friend_id)
            if await edges.get(friend_id, user_id) == FriendStatus.CONFIRMED:
                await edges.put(friend_id, user_id, FriendStatus.PENDING)
                logger.info(f"Ребро {friend_id} -> {user_id} возвращено в pending")

        if removed:
            logger.info(f"Дружба {user_id} -> {friend_id} удалена")

    @abstractmethod
    async def status(self, user_id: int, friend_id: int) -> Optional[FriendStatus]: ...

    @abstractmethod
    async def friends_of(self, user_id: int) -> set[int]:
        """id, связанные с user_id подтверждённым ребром в любую сторону."""

    @abstractmethod
    async def incoming_requests(self, user_id: int) -> set[int]:
        """id тех, чьё ребро к user_id ещё в PENDING."""

    @abstractmethod
    async def edge_count(self) -> int: ...

    async def common_friends(self, user_id: int, other_id: int) -> set[int]:
        return await self.friends_of(user_id) & await self.friends_of(other_id)


class _DictEdges:

    def __init__(self, edges: dict[tuple[int, int], FriendStatus]):
        self._data = edges

    async def get(self, user_id: int, friend_id: int) -> Optional[FriendStatus]:
        return self._data.get((user_id, friend_id))

    async def put(self, user_id: int, friend_id: int, status: FriendStatus) -> None:
        self._data[(user_id, friend_id)] = status

    async def remove(self, user_id: int, friend_id: int) -> bool:
        return self._data.pop((user_id, friend_id), None) is not None


class InMemoryFriendshipGraph(FriendshipGraph):

    def __init__(self):
        super().__init__()
        self._data: dict[tuple[int, int], FriendStatus] = {}

    @asynccontextmanager
    async def _edges(self) -> AsyncIterator[EdgeSet]:
        # Правим копию и подменяем словарь целиком: при ошибке изменения не видны
        draft = dict(self._data)
        yield _DictEdges(draft)
        self._data = draft

    async def status(self, user_id: int, friend_id: int) -> Optional[FriendStatus]:
        return self._data.get((user_id, friend_id))

    async def friends_of(self, user_id: int) -> set[int]:
        friends = set()
        for (a, b), status in self._data.items():
            if status != FriendStatus.CONFIRMED:
                continue
            if a == user_id:
                friends.add(b)
            elif b == user_id:
                friends.add(a)
        return friends

    async def incoming_requests(self, user_id: int) -> set[int]:
        return {
            a for (a, b), status in self._data.items()
            if b == user_id and status == FriendStatus.PENDING
        }

    async def edge_count(self) -> int:
        return len(self._data)
