from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger
from sqlalchemy import select, func, or_, delete as sa_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from filmorate.dao.base import commit_or_raise
from filmorate.database import connection
from filmorate.exception import IntegrityException
from filmorate.friends.graph import EdgeSet, FriendshipGraph
from filmorate.friends.models import Friend, FriendStatus


class _SessionEdges:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find(self, user_id: int, friend_id: int) -> Optional[Friend]:
        return await self.session.scalar(
            select(Friend).where(Friend.user_id == user_id, Friend.friend_id == friend_id)
        )

    async def get(self, user_id: int, friend_id: int) -> Optional[FriendStatus]:
        edge = await self._find(user_id, friend_id)
        return edge.status if edge else None

    async def put(self, user_id: int, friend_id: int, status: FriendStatus) -> None:
        edge = await self._find(user_id, friend_id)
        if edge is None:
            self.session.add(Friend(user_id=user_id, friend_id=friend_id, status=status))
        else:
            edge.status = status
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise IntegrityException() from e

    async def remove(self, user_id: int, friend_id: int) -> bool:
        result = await self.session.execute(
            sa_delete(Friend).where(Friend.user_id == user_id, Friend.friend_id == friend_id)
        )
        return bool(result.rowcount)


class FriendDAO(FriendshipGraph):
    """Граф дружбы в таблице friends: каждое изменение - одна транзакция."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__()
        self.session_maker = session_maker

    @asynccontextmanager
    async def _edges(self) -> AsyncIterator[EdgeSet]:
        async with self.session_maker() as session:
            try:
                yield _SessionEdges(session)
                await commit_or_raise(session)
            except Exception:
                await session.rollback()
                raise

    async def request(self, user_id: int, friend_id: int) -> FriendStatus:
        try:
            return await super().request(user_id, friend_id)
        except IntegrityException:
            # Ребро успел вставить другой процесс: повторяем по свежему состоянию
            logger.info(f"Повтор заявки {user_id} -> {friend_id} после конфликта вставки")
            return await super().request(user_id, friend_id)

    @connection
    async def status(self, user_id: int, friend_id: int, session: AsyncSession) -> Optional[FriendStatus]:
        return await _SessionEdges(session).get(user_id, friend_id)

    @connection
    async def friends_of(self, user_id: int, session: AsyncSession) -> set[int]:
        result = await session.execute(
            select(Friend.user_id, Friend.friend_id).where(
                Friend.status == FriendStatus.CONFIRMED,
                or_(Friend.user_id == user_id, Friend.friend_id == user_id),
            )
        )
        return {b if a == user_id else a for a, b in result.all()}

    @connection
    async def incoming_requests(self, user_id: int, session: AsyncSession) -> set[int]:
        result = await session.execute(
            select(Friend.user_id).where(Friend.friend_id == user_id, Friend.status == FriendStatus.PENDING)
        )
        return set(result.scalars().all())

    @connection
    async def edge_count(self, session: AsyncSession) -> int:
        return await session.scalar(select(func.count()).select_from(Friend)) or 0
