"""FastAPI dependencies resolving per-app state."""

from fastapi import Request

from config import Settings
from services.cache import RankingCaches


def get_caches(request: Request) -> RankingCaches:
    return request.app.state.caches


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
