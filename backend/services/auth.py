"""Bearer token supplier for the upstream social-graph API.

Posts the client credentials to the auth endpoint and caches the returned
access token until `expires_in` seconds have elapsed. A failed refresh yields
None; callers treat that as an upstream failure.
"""

import logging
import time
from typing import Callable

import httpx

logger = logging.getLogger(__name__)


class TokenSupplier:
    def __init__(
        self,
        client: httpx.AsyncClient,
        auth_url: str,
        credentials: dict,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._auth_url = auth_url
        self._credentials = credentials
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    @property
    def is_valid(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def get_valid_token(self) -> str | None:
        """Return the cached token, fetching a new one if absent or expired."""
        if not self.is_valid:
            await self._fetch_new_token()
        return self._token

    async def _fetch_new_token(self) -> None:
        logger.info("Fetching new upstream token")
        try:
            resp = await self._client.post(self._auth_url, json=self._credentials)
            resp.raise_for_status()
            data = resp.json()
            token = data["access_token"]
            expires_in = float(data["expires_in"])
        except httpx.HTTPError as e:
            logger.error("Error fetching token: %s", e)
            self.invalidate()
            return
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Auth response missing token fields: %s", e)
            self.invalidate()
            return

        self._token = token
        self._expires_at = self._clock() + expires_in
        logger.info("New token acquired (expires in %.0fs)", expires_in)
