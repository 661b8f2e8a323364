from pydantic import BaseModel


class StatsOut(BaseModel):
    film_count: int
    user_count: int
    total_likes: int
    total_friendships: int
