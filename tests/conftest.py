"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import httpx
import pytest

from core.config import AppSettings


class StubSource:
    """In-memory reverse-IP source implementing the source Protocol."""

    def __init__(
        self,
        name: str,
        domains: Iterable[str] = (),
        *,
        error: BaseException | None = None,
        delay: float = 0.0,
        calls: list[tuple[str, str]] | None = None,
    ) -> None:
        self.name = name
        self._domains = set(domains)
        self._error = error
        self._delay = delay
        self.calls = calls if calls is not None else []

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        self.calls.append((ip, self.name))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return set(self._domains)


@pytest.fixture
def settings() -> AppSettings:
    """Settings isolated from any .env file, without jitter or page delays."""
    return AppSettings(
        _env_file=None,
        request_jitter_min_ms=0,
        request_jitter_max_ms=0,
        thc_page_delay_seconds=0,
        randomize_user_agent=True,
    )


@pytest.fixture
def offline_client_factory():
    """Client factory whose transport refuses every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(599, request=request)

    return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))


def read_lines(path) -> list[str]:
    return [line for line in path.read_text(encoding="utf-8").splitlines() if line]
