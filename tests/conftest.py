from __future__ import annotations

import json
from collections.abc import Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import (
    ApiUrls,
    Config,
    LoyaltySettings,
    PlatformSettings,
    StaticUser,
)
from ui.dashboard import Dashboard

MOUNT = "/api/ext/loyalty"
V1 = "https://loyalty.test/api/v1"
V2 = "https://loyalty.test/api/v2"


class StubUpstream:
    """Records every upstream call and answers with a configurable handler."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"ok": True}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        assert self.calls, "upstream was never called"
        return self.calls[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)

    def last_query(self) -> list[tuple[str, str]]:
        return list(self.last.url.params.multi_items())


@pytest.fixture
def config() -> Config:
    return Config(
        loyalty=LoyaltySettings(
            api_url=ApiUrls(v1=V1, v2=V2),
            merchant_id="m-42",
            guid="guid-123",
            api_key="key-456",
        ),
        platform=PlatformSettings(
            name="static",
            static_users={"good": StaticUser(id="u1", email="a@x.com")},
        ),
    )


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
def dashboard(config: Config) -> Dashboard:
    return Dashboard(config, write_logs=False)


@pytest.fixture
def client(config: Config, dashboard: Dashboard, upstream: StubUpstream) -> Iterator[TestClient]:
    app = create_app(config, dashboard, transport=httpx.MockTransport(upstream))
    with TestClient(app) as test_client:
        yield test_client
