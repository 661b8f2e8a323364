from fastapi import APIRouter

from filmorate.dependencies import StatsServiceDep
from filmorate.stats.schemas import StatsOut

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=StatsOut)
async def get_stats(stats: StatsServiceDep):
    return await stats.get_stats()
