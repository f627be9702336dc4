"""Shared fixtures: fake clock, fake upstream, isolated settings."""

from pathlib import Path

import pytest

from config import Settings
from errors import UpstreamUnavailableError
from tests.fakes import FakeClock, FakeUpstream


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream(
        users={"1": "Alice", "2": "Bob", "3": "Carol"},
        posts={
            "1": [{"id": 10, "content": "a"}, {"id": 11, "content": "b"}],
            "2": [{"id": 20, "content": "c"}],
            "3": [
                {"id": 30, "content": "d"},
                {"id": 31, "content": "e"},
                {"id": 32, "content": "f"},
            ],
        },
        comments={
            "10": [{"id": 1}],
            "11": [{"id": 2}, {"id": 3}],
            "20": [{"id": 4}, {"id": 5}],
            "30": [],
            "31": UpstreamUnavailableError("boom"),
            "32": [{"id": 6}],
        },
    )


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    s = Settings()
    s.user_snapshot_path = str(tmp_path / "heap.json")
    s.post_snapshot_path = str(tmp_path / "popular_posts.json")
    s.scheduler_enabled = False
    s.top_n = 5
    return s
