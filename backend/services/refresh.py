"""Rebuild a RankedSet from the upstream API.

Two rankings share one walk over users → posts:
  - users scored by post count
  - posts scored by comment count (one comments call per post)

A failure fetching the user list aborts the refresh. A failure or malformed
answer for one user's posts (or one post's comments) skips that user (or
post) and the walk continues.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from errors import UpstreamUnavailableError
from services.ranked_set import RESERVED_FIELDS, RankedSet, ScoredItem
from services.upstream import UpstreamSource

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    inserted: int = 0
    skipped: int = 0


RankingBuilder = Callable[[UpstreamSource, RankedSet], Awaitable[RefreshResult]]


async def _posts_by_user(source: UpstreamSource, result: RefreshResult):
    """Yield (user_id, name, posts) for every user whose posts could be fetched."""
    users = await source.get_users()
    logger.info("Fetched %d users", len(users))

    for user_id, name in users.items():
        try:
            posts = await source.get_user_posts(user_id)
        except UpstreamUnavailableError as e:
            logger.warning("Skipping user %s: %s", user_id, e)
            result.skipped += 1
            continue
        yield user_id, name, posts


async def build_user_ranking(source: UpstreamSource, ranked_set: RankedSet) -> RefreshResult:
    """Insert one item per user, scored by the number of posts they have."""
    result = RefreshResult()
    async for user_id, name, posts in _posts_by_user(source, result):
        if ranked_set.insert(ScoredItem(id=user_id, score=len(posts), payload={"name": name})):
            result.inserted += 1
    return result


async def build_post_ranking(source: UpstreamSource, ranked_set: RankedSet) -> RefreshResult:
    """Insert one item per post, scored by the number of comments it has."""
    result = RefreshResult()
    async for user_id, _name, posts in _posts_by_user(source, result):
        for post in posts:
            post_id = post.get("id") if isinstance(post, dict) else None
            if post_id is None:
                logger.warning("Skipping post without id from user %s", user_id)
                result.skipped += 1
                continue

            try:
                comments = await source.get_post_comments(str(post_id))
            except UpstreamUnavailableError as e:
                logger.warning("Skipping post %s: %s", post_id, e)
                result.skipped += 1
                continue

            payload = {k: v for k, v in post.items() if k not in RESERVED_FIELDS}
            payload.setdefault("userid", user_id)
            if ranked_set.insert(ScoredItem(id=str(post_id), score=len(comments), payload=payload)):
                result.inserted += 1
    return result
