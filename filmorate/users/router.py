from fastapi import APIRouter

from filmorate.dependencies import UserServiceDep
from filmorate.users.schemas import UserCreate, UserUpdate, UserOut

router = APIRouter(prefix="/users", tags=["User"])


@router.post("", response_model=UserOut)
async def user_add(user: UserCreate, users: UserServiceDep):
    return await users.create(user)


@router.get("", response_model=list[UserOut])
async def get_all_users(users: UserServiceDep):
    return await users.find_all()


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, users: UserServiceDep):
    return await users.find_by_id(user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(user_id: int, user_update: UserUpdate, users: UserServiceDep):
    return await users.update(user_id, user_update)


@router.put("/{user_id}/friends/{friend_id}")
async def add_friend(user_id: int, friend_id: int, users: UserServiceDep):
    await users.add_friend(user_id, friend_id)
    return {"ok": True, "friend": {"user_id": user_id, "friend_id": friend_id}}


@router.delete("/{user_id}/friends/{friend_id}")
async def remove_friend(user_id: int, friend_id: int, users: UserServiceDep):
    await users.remove_friend(user_id, friend_id)
    return {"ok": True}


@router.get("/{user_id}/friends", response_model=list[UserOut])
async def get_friends(user_id: int, users: UserServiceDep):
    return await users.friends_of(user_id)


@router.get("/{user_id}/friends/requests", response_model=list[UserOut])
async def get_friend_requests(user_id: int, users: UserServiceDep):
    return await users.friend_requests(user_id)


@router.get("/{user_id}/friends/common/{other_id}", response_model=list[UserOut])
async def get_common_friends(user_id: int, other_id: int, users: UserServiceDep):
    return await users.common_friends(user_id, other_id)
