from datetime import date
from typing import Any, Iterable, Optional

from loguru import logger

from filmorate.dao.base import EntityStore
from filmorate.exception import NotFoundException, ValidationException
from filmorate.friends.graph import FriendshipGraph
from filmorate.locks import KeyedLocks
from filmorate.users.schemas import UserCreate, UserOut, UserUpdate


def check_email(email: Optional[str]) -> Optional[str]:
    if email is None or not email.strip() or "@" not in email:
        return "Email не может быть пустым и должен содержать @"
    return None


def check_login(login: Optional[str]) -> Optional[str]:
    if login is None or not login.strip() or any(ch.isspace() for ch in login):
        return "Логин не может быть пустым и содержать пробелы"
    return None


def check_birthday(birthday: Optional[date]) -> Optional[str]:
    if birthday is not None and birthday > date.today():
        return "Дата рождения не может быть в будущем"
    return None


FIELD_CHECKS = {
    "email": check_email,
    "login": check_login,
    "birthday": check_birthday,
}


def _validate(values: dict[str, Any]) -> None:
    errors = {}
    for field, value in values.items():
        check = FIELD_CHECKS.get(field)
        reason = check(value) if check else None
        if reason:
            errors[field] = reason
    if errors:
        logger.warning(f"Пользователь не прошел валидацию: {errors}")
        raise ValidationException(errors)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class SocialGraphService:
    """Пользователи и дружба между ними."""

    def __init__(self, users: EntityStore[UserOut], friends: FriendshipGraph):
        self.users = users
        self.friends = friends
        self._user_locks = KeyedLocks()

    async def _require_user(self, user_id: int) -> UserOut:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundException("Пользователь", user_id)
        return user

    async def _require_exists(self, *user_ids: int) -> None:
        for user_id in user_ids:
            if not await self.users.exists_by_id(user_id):
                raise NotFoundException("Пользователь", user_id)

    async def _hydrate(self, user_ids: Iterable[int]) -> list[UserOut]:
        users = []
        for user_id in sorted(user_ids):
            user = await self.users.find_by_id(user_id)
            if user is not None:
                users.append(user)
        return users

    async def create(self, draft: UserCreate) -> UserOut:
        logger.info(f"Создание пользователя: login={draft.login!r}, email={draft.email!r}")
        _validate({field: getattr(draft, field) for field in FIELD_CHECKS})

        user = UserOut(
            email=draft.email,
            login=draft.login,
            display_name=draft.login if _is_blank(draft.display_name) else draft.display_name,
            birthday=draft.birthday,
        )
        created = await self.users.create(user)
        logger.info(f"Пользователь создан с ID: {created.id}")
        return created

    async def update(self, user_id: int, patch: UserUpdate) -> UserOut:
        fields = set(patch.model_fields_set)
        logger.info(f"Обновление пользователя {user_id}, поля: {sorted(fields)}")

        async with self._user_locks.hold(user_id):
            existing = await self._require_user(user_id)
            changes = {field: getattr(patch, field) for field in fields}
            _validate(changes)

            merged = existing.model_copy(update=changes)
            if _is_blank(merged.display_name):
                merged.display_name = merged.login
            return await self.users.update(merged)

    async def find_by_id(self, user_id: int) -> UserOut:
        return await self._require_user(user_id)

    async def find_all(self) -> list[UserOut]:
        return await self.users.find_all()

    async def add_friend(self, user_id: int, friend_id: int) -> None:
        await self._require_exists(user_id, friend_id)
        if user_id == friend_id:
            raise ValidationException({"friend_id": "Пользователь не может добавить себя в друзья"})
        await self.friends.request(user_id, friend_id)

    async def remove_friend(self, user_id: int, friend_id: int) -> None:
        await self._require_exists(user_id, friend_id)
        await self.friends.withdraw(user_id, friend_id)

    async def friends_of(self, user_id: int) -> list[UserOut]:
        await self._require_exists(user_id)
        return await self._hydrate(await self.friends.friends_of(user_id))

    async def common_friends(self, user_id: int, other_id: int) -> list[UserOut]:
        await self._require_exists(user_id, other_id)
        return await self._hydrate(await self.friends.common_friends(user_id, other_id))

    async def friend_requests(self, user_id: int) -> list[UserOut]:
        await self._require_exists(user_id)
        return await self._hydrate(await self.friends.incoming_requests(user_id))
