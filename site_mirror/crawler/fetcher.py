# site_mirror/crawler/fetcher.py
"""
Fetcher module: single-shot HTTP GET returning text or bytes.

A transport error and a non-2xx status are reported the same way, as
:class:`FetchError`. Nothing is retried.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mirror.config import MirrorConfig
from site_mirror.logger import logger


class FetchError(Exception):
    """GET failed: transport error or unsuccessful status."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class Fetcher:
    """Owns one aiohttp session for the duration of a mirror run."""

    def __init__(self, config: MirrorConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch_text(self, url: str) -> str:
        """GET *url* and decode the body using the response charset."""
        return await self._get(url, binary=False)  # type: ignore[return-value]

    async def fetch_bytes(self, url: str) -> bytes:
        """GET *url* and return the raw body."""
        return await self._get(url, binary=True)  # type: ignore[return-value]

    async def _get(self, url: str, *, binary: bool) -> Union[str, bytes]:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}")
                if binary:
                    return await resp.read()
                return await resp.text()
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            # ValueError covers malformed URLs and undecodable text bodies
            logger.debug("GET %s failed: %r", url, exc)
            raise FetchError(url, str(exc) or type(exc).__name__) from exc


__all__ = ["Fetcher", "FetchError"]
