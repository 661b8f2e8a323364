from filmorate.dao.base import EntityStore
from filmorate.films.likes import LikeIndex
from filmorate.friends.graph import FriendshipGraph
from filmorate.stats.schemas import StatsOut


class StatsService:

    def __init__(self, films: EntityStore, users: EntityStore, likes: LikeIndex, friends: FriendshipGraph):
        self.films = films
        self.users = users
        self.likes = likes
        self.friends = friends

    async def get_stats(self) -> StatsOut:
        return StatsOut(
            film_count=await self.films.count(),
            user_count=await self.users.count(),
            total_likes=await self.likes.total_likes(),
            total_friendships=await self.friends.edge_count(),
        )
