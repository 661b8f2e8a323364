import pytest

from filmorate.catalog.router import get_genre, get_genres, get_maturity_rating, get_maturity_ratings
from filmorate.catalog.schemas import GenreOut
from filmorate.catalog.service import ReferenceCatalog, load_reference_catalog, seed_reference_catalog
from filmorate.exception import NotFoundException


def test_default_catalog_lookup():
    catalog = ReferenceCatalog.default()

    assert catalog.genre(2).name == "Драма"
    assert catalog.maturity_rating(5).name == "NC-17"
    assert [genre.id for genre in catalog.all_genres()] == [1, 2, 3, 4, 5, 6]
    assert [rating.name for rating in catalog.all_maturity_ratings()] == ["G", "PG", "PG-13", "R", "NC-17"]


def test_unknown_ids_fail_closed():
    catalog = ReferenceCatalog.default()

    with pytest.raises(NotFoundException) as exc:
        catalog.genre(0)
    assert exc.value.entity == "Жанр"
    assert exc.value.status_code == 404

    with pytest.raises(NotFoundException):
        catalog.maturity_rating(6)


def test_resolve_genres_names_first_missing_id():
    catalog = ReferenceCatalog([GenreOut(id=3, name="c"), GenreOut(id=1, name="a")], [])

    assert [genre.id for genre in catalog.resolve_genres([3, 1, 3])] == [1, 3]
    assert catalog.all_genres()[0].name == "a"

    with pytest.raises(NotFoundException) as exc:
        catalog.resolve_genres([1, 9, 8])
    assert exc.value.entity_id == 8


@pytest.mark.asyncio
async def test_database_catalog_matches_seed(session_maker):
    # Повторный seed не дублирует записи
    await seed_reference_catalog(session_maker)

    catalog = await load_reference_catalog(session_maker)
    default = ReferenceCatalog.default()

    assert catalog.all_genres() == default.all_genres()
    assert catalog.all_maturity_ratings() == default.all_maturity_ratings()


@pytest.mark.asyncio
async def test_catalog_endpoints():
    catalog = ReferenceCatalog.default()

    assert len(await get_genres(catalog)) == 6
    assert (await get_genre(6, catalog)).name == "Боевик"
    assert len(await get_maturity_ratings(catalog)) == 5
    assert (await get_maturity_rating(1, catalog)).description == "Нет возрастных ограничений"

    with pytest.raises(NotFoundException):
        await get_genre(100, catalog)
