from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from filmorate.database import Base


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Genre id={self.id} name={self.name!r}>"


class MaturityRating(Base):
    __tablename__ = "maturity_ratings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<MaturityRating id={self.id} name={self.name!r}>"
