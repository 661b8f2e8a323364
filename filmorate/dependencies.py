from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from filmorate.catalog.service import ReferenceCatalog, load_reference_catalog
from filmorate.config import Settings
from filmorate.dao.memory import InMemoryStore
from filmorate.films.dao import FilmDAO, LikeDAO
from filmorate.films.likes import InMemoryLikeIndex
from filmorate.films.services import FilmCatalogService
from filmorate.friends.dao import FriendDAO
from filmorate.friends.graph import InMemoryFriendshipGraph
from filmorate.stats.services import StatsService
from filmorate.users.dao import UserDAO
from filmorate.users.services import SocialGraphService


@dataclass
class Services:
    films: FilmCatalogService
    users: SocialGraphService
    catalog: ReferenceCatalog
    stats: StatsService


async def build_services(
    settings: Settings,
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
) -> Services:
    """Собирает хранилища выбранного типа один раз при старте и связывает сервисы."""
    if settings.STORAGE == "memory":
        film_store = InMemoryStore("Фильм")
        user_store = InMemoryStore("Пользователь")
        likes = InMemoryLikeIndex()
        friends = InMemoryFriendshipGraph()
        catalog = ReferenceCatalog.default()
    else:
        if session_maker is None:
            raise ValueError("Для STORAGE=database нужен session_maker")
        film_store = FilmDAO(session_maker)
        user_store = UserDAO(session_maker)
        likes = LikeDAO(session_maker)
        friends = FriendDAO(session_maker)
        catalog = await load_reference_catalog(session_maker)

    logger.info(f"Хранилище: {settings.STORAGE}")
    return Services(
        films=FilmCatalogService(film_store, user_store, likes, catalog),
        users=SocialGraphService(user_store, friends),
        catalog=catalog,
        stats=StatsService(film_store, user_store, likes, friends),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_film_service(request: Request) -> FilmCatalogService:
    return get_services(request).films


def get_user_service(request: Request) -> SocialGraphService:
    return get_services(request).users


def get_catalog(request: Request) -> ReferenceCatalog:
    return get_services(request).catalog


def get_stats_service(request: Request) -> StatsService:
    return get_services(request).stats


FilmServiceDep = Annotated[FilmCatalogService, Depends(get_film_service)]
UserServiceDep = Annotated[SocialGraphService, Depends(get_user_service)]
CatalogDep = Annotated[ReferenceCatalog, Depends(get_catalog)]
StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]
