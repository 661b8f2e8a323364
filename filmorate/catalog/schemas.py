from pydantic import BaseModel, ConfigDict


class GenreOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class MaturityRatingOut(BaseModel):
    id: int
    name: str
    description: str = ""

    model_config = ConfigDict(from_attributes=True, frozen=True)


class CatalogRef(BaseModel):
    """Ссылка на запись справочника в запросе: {"id": 1}. Остальные поля игнорируются."""
    id: int
