"""Shared fixtures: a live mock directory server and fast run options."""

import asyncio
import socket
import threading
import time
from collections.abc import Callable, Generator
from contextlib import closing
from pathlib import Path
from typing import Any

import pytest
from aiohttp import web

from devby.data_types import RunOptions
from tests.mock_server import MockSite, create_app


def find_free_port() -> int:
    """Find a free port on localhost."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        self._started.wait(timeout=5.0)
        time.sleep(0.05)

    def _run_server(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(
                runner.cleanup(), self._loop
            )
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def mock_site() -> MockSite:
    """Fresh mock directory state with the default companies."""
    return MockSite()


@pytest.fixture
def devby_server(mock_site: MockSite) -> Generator[AioHttpTestServer, None, None]:
    """Start a real HTTP server serving the mock directory."""
    server = AioHttpTestServer(create_app(mock_site), find_free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_url(devby_server: AioHttpTestServer) -> str:
    return devby_server.url


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    return tmp_path / "companies.json"


@pytest.fixture
def make_options(output_path: Path) -> Callable[..., RunOptions]:
    """Build RunOptions with zero delays, overridable per test."""

    def factory(**overrides: Any) -> RunOptions:
        values: dict[str, Any] = {
            "output_path": output_path,
            "retries_per_company": 2,
            "delay_between_retries": 0,
            "delay_between_companies": 0,
            "timeout": 5.0,
        }
        values.update(overrides)
        return RunOptions(**values)

    return factory
