from functools import wraps

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column, DeclarativeBase
from sqlalchemy.ext.asyncio import AsyncAttrs, async_sessionmaker, create_async_engine, AsyncSession, AsyncEngine


def create_engine(url: str, **kwargs) -> AsyncEngine:
    return create_async_engine(url=url, **kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: после commit объекты читаются без повторного запроса
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def connection(method):
    """
    Открывает сессию на время вызова метода DAO и передаёт её в kwargs.
    У объекта DAO должен быть атрибут session_maker.
    """
    @wraps(method)
    async def wrapper(self, *args, **kwargs):
        async with self.session_maker() as session:
            try:
                return await method(self, *args, session=session, **kwargs)
            except Exception:
                await session.rollback()  # Откатываем сессию при ошибке
                raise

    return wrapper


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class Base(AsyncAttrs, DeclarativeBase):
    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
