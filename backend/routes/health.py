"""Health and readiness check routes."""

from fastapi import APIRouter, Depends

from config import Settings
from routes.deps import get_caches, get_settings
from services.cache import CacheSlot, RankingCaches

router = APIRouter()


def _slot_status(slot: CacheSlot) -> dict:
    return {
        "size": slot.ranked_set.size(),
        "refreshing": slot.is_refreshing,
        "snapshot": str(slot.store.path),
        "snapshot_exists": slot.store.exists(),
    }


@router.get("/ready")
async def ready(settings: Settings = Depends(get_settings)) -> dict:
    """Lightweight readiness check, no external calls."""
    return {"status": "ok", "service": "social-rankings", "commit": settings.git_sha}


@router.get("/health")
async def health(
    caches: RankingCaches = Depends(get_caches),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Cache health: size of each slot and whether its snapshot is on disk."""
    slots = {
        "users": _slot_status(caches.users),
        "posts": _slot_status(caches.posts),
    }
    status = "ok" if all(s["size"] > 0 for s in slots.values()) else "degraded"
    return {"status": status, "service": "social-rankings", "commit": settings.git_sha, "slots": slots}
