"""
Тесты лайков и рейтинга популярности.
"""
import asyncio

import pytest

from filmorate.config import Settings
from filmorate.dependencies import build_services
from filmorate.exception import NotFoundException, ValidationException
from filmorate.films.dao import LikeDAO
from filmorate.films.likes import InMemoryLikeIndex


async def _films(services, film_draft, n):
    return [await services.films.create(film_draft(title=f"Фильм {i}")) for i in range(n)]


async def _users(services, user_draft, n):
    return [await services.users.create(user_draft(f"user{i}")) for i in range(n)]


@pytest.mark.asyncio
async def test_add_like_is_idempotent(services, film_draft, user_draft):
    film, = await _films(services, film_draft, 1)
    user, = await _users(services, user_draft, 1)

    await services.films.add_like(film.id, user.id)
    await services.films.add_like(film.id, user.id)

    assert await services.films.likes.like_count(film.id) == 1
    hydrated = await services.films.find_by_id(film.id)
    assert hydrated.liked_by == [user.id]
    assert hydrated.popularity == 1


@pytest.mark.asyncio
async def test_remove_missing_like_changes_nothing(services, film_draft, user_draft):
    film, = await _films(services, film_draft, 1)
    alice, bob = await _users(services, user_draft, 2)
    await services.films.add_like(film.id, alice.id)

    await services.films.remove_like(film.id, bob.id)

    assert await services.films.likes.likers_of(film.id) == frozenset({alice.id})


@pytest.mark.asyncio
async def test_remove_like(services, film_draft, user_draft):
    film, = await _films(services, film_draft, 1)
    user, = await _users(services, user_draft, 1)
    await services.films.add_like(film.id, user.id)

    await services.films.remove_like(film.id, user.id)

    assert await services.films.likes.like_count(film.id) == 0


@pytest.mark.asyncio
async def test_like_requires_existing_film_and_user(services, film_draft, user_draft):
    film, = await _films(services, film_draft, 1)
    user, = await _users(services, user_draft, 1)

    with pytest.raises(NotFoundException) as exc:
        await services.films.add_like(999, user.id)
    assert exc.value.entity == "Фильм"

    with pytest.raises(NotFoundException) as exc:
        await services.films.add_like(film.id, 999)
    assert exc.value.entity == "Пользователь"

    with pytest.raises(NotFoundException):
        await services.films.remove_like(film.id, 999)

    assert await services.films.likes.total_likes() == 0


@pytest.mark.asyncio
async def test_popular_films_orders_by_like_count(services, film_draft, user_draft):
    top, middle, empty = await _films(services, film_draft, 3)
    users = await _users(services, user_draft, 5)
    for user in users:
        await services.films.add_like(top.id, user.id)
    for user in users[:3]:
        await services.films.add_like(middle.id, user.id)

    popular = await services.films.popular_films(2)

    assert [film.id for film in popular] == [top.id, middle.id]
    assert [film.popularity for film in popular] == [5, 3]


@pytest.mark.asyncio
async def test_popular_films_more_than_catalog(services, film_draft):
    films = await _films(services, film_draft, 2)

    popular = await services.films.popular_films(10)

    assert len(popular) == len(films)


@pytest.mark.asyncio
async def test_popular_films_ties_by_descending_id(services, film_draft, user_draft):
    first, second, third = await _films(services, film_draft, 3)
    user, = await _users(services, user_draft, 1)
    await services.films.add_like(second.id, user.id)

    popular = await services.films.popular_films(3)

    assert [film.id for film in popular] == [second.id, third.id, first.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, -1])
async def test_popular_films_requires_positive_count(services, count):
    with pytest.raises(ValidationException) as exc:
        await services.films.popular_films(count)
    assert "count" in exc.value.errors


@pytest.mark.asyncio
async def test_concurrent_likes_keep_set_semantics():
    index = InMemoryLikeIndex()

    await asyncio.gather(*(index.add_like(1, user_id % 3) for user_id in range(30)))
    await asyncio.gather(*(index.remove_like(1, 0) for _ in range(5)))

    assert await index.likers_of(1) == frozenset({1, 2})
    assert await index.snapshot() == {1: frozenset({1, 2})}


@pytest.mark.asyncio
async def test_snapshot_is_a_copy():
    index = InMemoryLikeIndex()
    await index.add_like(1, 10)

    snapshot = await index.snapshot()
    await index.add_like(1, 11)

    assert snapshot[1] == frozenset({10})


@pytest.mark.asyncio
async def test_like_inserted_by_another_process_is_not_a_conflict(session_maker, film_draft, user_draft, monkeypatch):
    services = await build_services(Settings(STORAGE="database"), session_maker)
    film = await services.films.create(film_draft())
    user = await services.users.create(user_draft("dolore"))
    await services.films.add_like(film.id, user.id)

    real_has_like = LikeDAO._has_like
    stale_reads = [True]

    async def has_like(session, film_id, user_id):
        # Первая проверка не видит строку, которую вставил другой процесс
        if stale_reads:
            stale_reads.pop()
            return False
        return await real_has_like(session, film_id, user_id)

    monkeypatch.setattr(LikeDAO, "_has_like", staticmethod(has_like))

    await services.films.add_like(film.id, user.id)

    assert stale_reads == []
    assert await services.films.likes.like_count(film.id) == 1
