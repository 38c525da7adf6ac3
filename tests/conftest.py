# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Dict, List, Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_mirror.config import MirrorConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def respond(body: Union[str, bytes], content_type: str = "text/plain", status: int = 200) -> Handler:
    """Build a handler returning a fixed body."""

    async def handler(_request: web.Request) -> web.Response:
        if isinstance(body, bytes):
            return web.Response(body=body, content_type=content_type, status=status)
        return web.Response(text=body, content_type=content_type, status=status)

    return handler


def html_page(template: str) -> Handler:
    """Build a handler rendering *template* with ``{base}`` set to the server origin."""

    async def handler(request: web.Request) -> web.Response:
        base = f"http://{request.host}"
        return web.Response(text=template.replace("{base}", base), content_type="text/html")

    return handler


class SiteServer:
    """Local aiohttp site that records every requested path."""

    def __init__(self, port: int) -> None:
        self.port = port
        self.hits: List[str] = []
        self._runner: web.AppRunner | None = None

    @property
    def base(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    async def start(self, routes: Dict[str, Handler]) -> str:
        @web.middleware
        async def record(request: web.Request, handler: Handler) -> web.StreamResponse:
            self.hits.append(request.path_qs)
            return await handler(request)

        app = web.Application(middlewares=[record])
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        await web.TCPSite(self._runner, "127.0.0.1", self.port).start()
        return self.base

    async def close(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()


@pytest_asyncio.fixture
async def site(unused_tcp_port: int) -> AsyncIterator[SiteServer]:
    server = SiteServer(unused_tcp_port)
    yield server
    await server.close()


@pytest.fixture()
def mirror_config() -> MirrorConfig:
    """Return a basic valid MirrorConfig for fetcher/extractor tests."""
    return MirrorConfig(depth=5, timeout=5.0, user_agent="TestAgent/1.0")
