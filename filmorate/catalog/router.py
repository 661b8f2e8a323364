from fastapi import APIRouter

from filmorate.catalog.schemas import GenreOut, MaturityRatingOut
from filmorate.dependencies import CatalogDep

router = APIRouter(tags=["Catalog"])


@router.get("/genres", response_model=list[GenreOut])
async def get_genres(catalog: CatalogDep):
    return catalog.all_genres()


@router.get("/genres/{genre_id}", response_model=GenreOut)
async def get_genre(genre_id: int, catalog: CatalogDep):
    return catalog.genre(genre_id)


@router.get("/mpa", response_model=list[MaturityRatingOut])
async def get_maturity_ratings(catalog: CatalogDep):
    return catalog.all_maturity_ratings()


@router.get("/mpa/{rating_id}", response_model=MaturityRatingOut)
async def get_maturity_rating(rating_id: int, catalog: CatalogDep):
    return catalog.maturity_rating(rating_id)
