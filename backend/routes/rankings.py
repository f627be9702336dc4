"""Ranking routes: top users, popular and latest posts, forced refreshes.

GET /users               → top users by post count
GET /posts?type=popular  → every post tied at the highest comment count
GET /posts?type=latest   → most recently ingested posts
GET /create-user-heap    → rebuild the user ranking now
GET /create-post-heap    → rebuild the post ranking now

Query routes refresh an empty slot before answering.
"""

import logging

from fastapi import APIRouter, Depends, Query

from config import Settings
from errors import InvalidRequestError, RankingServiceError, RefreshFailedError
from routes.deps import get_caches, get_settings
from services.cache import CacheSlot, RankingCaches

logger = logging.getLogger(__name__)

router = APIRouter()


def _records(items) -> list[dict]:
    return [item.to_dict() for item in items]


@router.get("/users")
async def top_users(
    caches: RankingCaches = Depends(get_caches),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Top users by post count."""
    await caches.users.ensure_populated()
    return {"topUsers": _records(caches.users.ranked_set.top_by_score(settings.top_n))}


@router.get("/posts")
async def posts(
    post_type: str | None = Query(None, alias="type"),
    caches: RankingCaches = Depends(get_caches),
    settings: Settings = Depends(get_settings),
) -> dict:
    if post_type == "popular":
        await caches.posts.ensure_populated()
        return {"mostPopularPosts": _records(caches.posts.ranked_set.max_score_group())}

    if post_type == "latest":
        await caches.posts.ensure_populated()
        return {"latestPosts": _records(caches.posts.ranked_set.top_by_recency(settings.top_n))}

    raise InvalidRequestError()


async def _force_refresh(slot: CacheSlot) -> dict:
    try:
        result = await slot.refresh()
    except RankingServiceError as e:
        logger.error("Refresh of %s failed: %s", slot.name, e)
        raise RefreshFailedError(slot.name) from e
    return {"message": f"{slot.name.capitalize()} refreshed with {result.inserted} items."}


@router.get("/create-user-heap")
async def create_user_heap(caches: RankingCaches = Depends(get_caches)) -> dict:
    return await _force_refresh(caches.users)


@router.get("/create-post-heap")
async def create_post_heap(caches: RankingCaches = Depends(get_caches)) -> dict:
    return await _force_refresh(caches.posts)
