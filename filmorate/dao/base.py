from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, func, update as sqlalchemy_update, delete as sqlalchemy_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from loguru import logger

from filmorate.database import connection
from filmorate.exception import IntegrityException, NotFoundException

EntityT = TypeVar("EntityT", bound=BaseModel)


class EntityStore(ABC, Generic[EntityT]):
    """CRUD-хранилище сущностей. Сервисы работают только через этот интерфейс."""

    entity_name = "Объект"

    @abstractmethod
    async def create(self, entity: EntityT) -> EntityT:
        """Сохраняет сущность и возвращает её с присвоенным id."""

    @abstractmethod
    async def update(self, entity: EntityT) -> EntityT:
        """Перезаписывает сущность целиком. NotFoundException, если id нет."""

    @abstractmethod
    async def find_by_id(self, entity_id: int) -> Optional[EntityT]: ...

    @abstractmethod
    async def find_all(self) -> list[EntityT]: ...

    @abstractmethod
    async def exists_by_id(self, entity_id: int) -> bool: ...

    @abstractmethod
    async def delete(self, entity_id: int) -> None: ...

    @abstractmethod
    async def count(self) -> int: ...


async def commit_or_raise(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"База отклонила запись: {e.orig}")
        raise IntegrityException() from e


class BaseDAO(EntityStore[EntityT]):
    """Хранилище поверх SQLAlchemy: одна сессия на вызов."""

    model = None
    schema: type[BaseModel] = None

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    def _values(self, entity: EntityT) -> dict:
        return entity.model_dump(exclude={"id"})

    def _to_entity(self, obj) -> EntityT:
        return self.schema.model_validate(obj)

    async def _get(self, session: AsyncSession, entity_id: int):
        query = select(self.model).filter_by(id=entity_id).execution_options(populate_existing=True)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    @connection
    async def create(self, entity: EntityT, session: AsyncSession) -> EntityT:
        new_instance = self.model(**self._values(entity))
        session.add(new_instance)
        await commit_or_raise(session)
        return self._to_entity(await self._get(session, new_instance.id))

    @connection
    async def update(self, entity: EntityT, session: AsyncSession) -> EntityT:
        query = sqlalchemy_update(self.model) \
            .where(self.model.id == entity.id) \
            .values(**self._values(entity))
        result = await session.execute(query)
        if not result.rowcount:
            await session.rollback()
            raise NotFoundException(self.entity_name, entity.id)
        await commit_or_raise(session)
        return self._to_entity(await self._get(session, entity.id))

    @connection
    async def find_by_id(self, entity_id: int, session: AsyncSession) -> Optional[EntityT]:
        obj = await self._get(session, entity_id)
        return self._to_entity(obj) if obj is not None else None

    @connection
    async def find_all(self, session: AsyncSession) -> list[EntityT]:
        result = await session.execute(select(self.model).order_by(self.model.id))
        return [self._to_entity(obj) for obj in result.scalars().all()]

    @connection
    async def exists_by_id(self, entity_id: int, session: AsyncSession) -> bool:
        query = select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        return bool(await session.scalar(query))

    @connection
    async def delete(self, entity_id: int, session: AsyncSession) -> None:
        await session.execute(sqlalchemy_delete(self.model).filter_by(id=entity_id))
        await commit_or_raise(session)

    @connection
    async def count(self, session: AsyncSession) -> int:
        return await session.scalar(select(func.count()).select_from(self.model)) or 0
