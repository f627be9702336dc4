"""Client for the upstream social-graph API (users, posts, comments).

Endpoints:
    GET /users                  → {"users": {id: name}}
    GET /users/{id}/posts       → {"posts": [Post, ...]}
    GET /posts/{id}/comments    → {"comments": [Comment, ...]}
"""

import logging
from typing import Protocol

import httpx

from errors import AuthFailureError, MalformedUpstreamShapeError, UpstreamUnavailableError
from services.auth import TokenSupplier

logger = logging.getLogger(__name__)


class UpstreamSource(Protocol):
    async def get_users(self) -> dict[str, str]: ...

    async def get_user_posts(self, user_id: str) -> list[dict]: ...

    async def get_post_comments(self, post_id: str) -> list[dict]: ...


class SocialGraphClient:
    """UpstreamSource over httpx with bearer auth from a TokenSupplier."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, tokens: TokenSupplier):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._tokens = tokens

    async def _get_json(self, path: str) -> dict:
        token = await self._tokens.get_valid_token()
        if not token:
            raise AuthFailureError(f"No upstream token available for {path}")

        url = f"{self._base_url}{path}"
        try:
            resp = await self._client.get(url, headers={"Authorization": f"Bearer {token}"})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"GET {path} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedUpstreamShapeError(f"GET {path} returned non-JSON body") from e
        if not isinstance(data, dict):
            raise MalformedUpstreamShapeError(f"GET {path} returned {type(data).__name__}, expected object")
        return data

    async def get_users(self) -> dict[str, str]:
        data = await self._get_json("/users")
        users = data.get("users")
        if not isinstance(users, dict):
            raise MalformedUpstreamShapeError("Invalid user response data")
        return {str(user_id): name for user_id, name in users.items()}

    async def get_user_posts(self, user_id: str) -> list[dict]:
        data = await self._get_json(f"/users/{user_id}/posts")
        posts = data.get("posts")
        if not isinstance(posts, list):
            raise MalformedUpstreamShapeError(f"No posts found for user {user_id}")
        return posts

    async def get_post_comments(self, post_id: str) -> list[dict]:
        data = await self._get_json(f"/posts/{post_id}/comments")
        comments = data.get("comments")
        if not isinstance(comments, list):
            raise MalformedUpstreamShapeError(f"No comments found for post {post_id}")
        return comments
