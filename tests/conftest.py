from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from cli.client import SupabaseClient
from cli.config import CheckConfig
from fakes import API_KEY, BASE_URL, FakeBackend, FakeClock
from settings import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch) -> None:
    for name in (
        "HOURLY_CHECK_POLL_INTERVAL",
        "HOURLY_CHECK_POLL_TIMEOUT",
        "HOURLY_CHECK_FUNCTION_NAME",
        "HOURLY_CHECK_TABLE_NAME",
        "HTTP_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def config() -> CheckConfig:
    return CheckConfig(base_url=BASE_URL, api_key=API_KEY)


@pytest.fixture()
def make_client(config: CheckConfig, clock: FakeClock) -> Callable[[FakeBackend], SupabaseClient]:
    clients: List[SupabaseClient] = []

    def factory(backend: FakeBackend) -> SupabaseClient:
        client = SupabaseClient(
            config,
            transport=httpx.MockTransport(backend.handler),
            clock=clock,
            sleep=clock.sleep,
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
