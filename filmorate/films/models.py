from datetime import date
from typing import Optional

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from filmorate.database import Base
from filmorate.catalog.models import Genre, MaturityRating

film_genres = Table(
    "film_genres",
    Base.metadata,
    Column("film_id", Integer, ForeignKey("films.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id"), primary_key=True),
)


class Film(Base):
    __tablename__ = "films"

    id: Mapped[int] = mapped_column(primary_key=True, index=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    synopsis: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    release_date: Mapped[date] = mapped_column(Date, nullable=False)
    runtime_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    maturity_rating_id: Mapped[Optional[int]] = mapped_column(ForeignKey("maturity_ratings.id"), nullable=True)

    maturity_rating: Mapped[Optional[MaturityRating]] = relationship(lazy="selectin")
    genres: Mapped[list[Genre]] = relationship(secondary=film_genres, lazy="selectin", order_by=Genre.id)

    def __repr__(self) -> str:
        return f"<Film id={self.id} title={self.title!r}>"


class FilmLike(Base):
    __tablename__ = "film_likes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    film_id: Mapped[int] = mapped_column(Integer, ForeignKey("films.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (UniqueConstraint("film_id", "user_id", name="uq_film_like"),)
