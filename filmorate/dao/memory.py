import asyncio
from itertools import count
from typing import Optional

from filmorate.dao.base import EntityStore, EntityT
from filmorate.exception import NotFoundException


class InMemoryStore(EntityStore[EntityT]):
    """Хранилище в словаре процесса. Отдаёт копии, чтобы вызывающий код не менял состояние."""

    def __init__(self, entity_name: str = "Объект"):
        self.entity_name = entity_name
        self._items: dict[int, EntityT] = {}
        self._ids = count(1)
        self._lock = asyncio.Lock()

    async def create(self, entity: EntityT) -> EntityT:
        async with self._lock:
            stored = entity.model_copy(update={"id": next(self._ids)}, deep=True)
            self._items[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update(self, entity: EntityT) -> EntityT:
        async with self._lock:
            if entity.id not in self._items:
                raise NotFoundException(self.entity_name, entity.id)
            self._items[entity.id] = entity.model_copy(deep=True)
        return entity.model_copy(deep=True)

    async def find_by_id(self, entity_id: int) -> Optional[EntityT]:
        item = self._items.get(entity_id)
        return item.model_copy(deep=True) if item is not None else None

    async def find_all(self) -> list[EntityT]:
        return [self._items[key].model_copy(deep=True) for key in sorted(self._items)]

    async def exists_by_id(self, entity_id: int) -> bool:
        return entity_id in self._items

    async def delete(self, entity_id: int) -> None:
        async with self._lock:
            self._items.pop(entity_id, None)

    async def count(self) -> int:
        return len(self._items)
