from filmorate.dao.base import BaseDAO
from filmorate.users.models import User
from filmorate.users.schemas import UserOut


class UserDAO(BaseDAO[UserOut]):
    model = User
    schema = UserOut
    entity_name = "Пользователь"
