"""Test doubles for the clock and the upstream API."""

from errors import MalformedUpstreamShapeError


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """In-memory UpstreamSource.

    `posts` maps user id → list of posts, or an exception instance to raise.
    `comments` maps post id → list of comments, or an exception instance.
    """

    def __init__(
        self,
        users: dict[str, str] | Exception,
        posts: dict | None = None,
        comments: dict | None = None,
    ) -> None:
        self.users = users
        self.posts = posts or {}
        self.comments = comments or {}
        self.user_list_calls = 0

    async def get_users(self) -> dict[str, str]:
        self.user_list_calls += 1
        if isinstance(self.users, Exception):
            raise self.users
        return dict(self.users)

    async def get_user_posts(self, user_id: str) -> list[dict]:
        value = self.posts.get(user_id)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise MalformedUpstreamShapeError(f"No posts found for user {user_id}")
        return value

    async def get_post_comments(self, post_id: str) -> list[dict]:
        value = self.comments.get(post_id, [])
        if isinstance(value, Exception):
            raise value
        return value
