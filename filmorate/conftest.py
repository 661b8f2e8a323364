"""
Фикстуры для тестов: сервисы поверх обоих вариантов хранилища.
"""
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from filmorate.catalog.schemas import CatalogRef
from filmorate.catalog.service import seed_reference_catalog
from filmorate.config import Settings
from filmorate.database import create_session_maker, create_tables
from filmorate.dependencies import build_services
from filmorate.films.schemas import FilmCreate
from filmorate.users.schemas import UserCreate


@pytest_asyncio.fixture
async def session_maker():
    """In-memory SQLite: одно соединение на весь тест, чтобы все сессии видели одну базу."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)
    await create_tables(engine)
    maker = create_session_maker(engine)
    await seed_reference_catalog(maker)
    yield maker
    await engine.dispose()


@pytest_asyncio.fixture(params=["memory", "database"])
async def services(request, session_maker):
    """Один и тот же тест прогоняется на обоих хранилищах."""
    return await build_services(Settings(STORAGE=request.param), session_maker)


@pytest_asyncio.fixture
async def memory_services():
    return await build_services(Settings(STORAGE="memory"))


@pytest.fixture
def film_draft():
    def make(title="Фильм", release_date=date(2000, 1, 1), runtime_minutes=90, **extra):
        return FilmCreate(title=title, release_date=release_date, runtime_minutes=runtime_minutes, **extra)
    return make


@pytest.fixture
def genre_refs():
    def make(*ids):
        return [CatalogRef(id=genre_id) for genre_id in ids]
    return make


@pytest.fixture
def user_draft():
    def make(login, **extra):
        extra.setdefault("email", f"{login}@example.com")
        return UserCreate(login=login, **extra)
    return make


@pytest_asyncio.fixture
async def three_users(services, user_draft):
    return [await services.users.create(user_draft(login)) for login in ("alice", "bob", "carol")]
