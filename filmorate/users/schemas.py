from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    email: Optional[str] = None
    login: Optional[str] = None
    display_name: Optional[str] = None
    birthday: Optional[date] = None


class UserUpdate(BaseModel):
    email: Optional[str] = None
    login: Optional[str] = None
    display_name: Optional[str] = None
    birthday: Optional[date] = None


class UserOut(BaseModel):
    id: Optional[int] = None
    email: str
    login: str
    display_name: str
    birthday: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)
