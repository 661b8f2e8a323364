from fastapi import APIRouter, Query

from filmorate.config import settings
from filmorate.dependencies import FilmServiceDep
from filmorate.films.schemas import FilmCreate, FilmOut, FilmUpdate

router = APIRouter(prefix="/films", tags=["Films"])


@router.post("", response_model=FilmOut)
async def create_film(film: FilmCreate, films: FilmServiceDep):
    return await films.create(film)


@router.get("", response_model=list[FilmOut])
async def get_all_films(films: FilmServiceDep):
    return await films.find_all()


@router.get("/popular", response_model=list[FilmOut])
async def get_popular_films(
    films: FilmServiceDep,
    count: int = Query(settings.POPULAR_DEFAULT_COUNT, description="Сколько фильмов вернуть"),
):
    return await films.popular_films(count)


@router.get("/{film_id}", response_model=FilmOut)
async def get_film(film_id: int, films: FilmServiceDep):
    return await films.find_by_id(film_id)


@router.patch("/{film_id}", response_model=FilmOut)
async def update_film(film_id: int, film_update: FilmUpdate, films: FilmServiceDep):
    return await films.update(film_id, film_update)


@router.put("/{film_id}/like/{user_id}")
async def add_like(film_id: int, user_id: int, films: FilmServiceDep):
    await films.add_like(film_id, user_id)
    return {"ok": True}


@router.delete("/{film_id}/like/{user_id}")
async def remove_like(film_id: int, user_id: int, films: FilmServiceDep):
    await films.remove_like(film_id, user_id)
    return {"ok": True}
