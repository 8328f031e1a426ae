"""集成测试共享 fixture -- 真实 ActivityClient + httpx.MockTransport 模拟下游活动服务"""

import json
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskhub.activity import ActivityClient
from taskhub.core.store import create_store_group

ACTIVITY_URL = "http://activity.test/api/activities"


class ActivityRecorder:
    """下游活动服务：记录请求体，可按状态码失败"""

    def __init__(self) -> None:
        self.payloads: list[dict] = []
        self.headers: list[httpx.Headers] = []
        self.status_code = 201

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(json.loads(request.content))
        self.headers.append(request.headers)
        return httpx.Response(self.status_code, json={"ok": self.status_code < 400})


@pytest.fixture
def activity_recorder() -> ActivityRecorder:
    return ActivityRecorder()


@pytest_asyncio.fixture
async def activity_client(activity_recorder) -> AsyncGenerator[ActivityClient, None]:
    client = ActivityClient(
        base_url=ACTIVITY_URL,
        api_key="integration-key",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(activity_recorder)),
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store_group(tmp_path: Path):
    group = await create_store_group(str(tmp_path / "integration.db"))
    yield group
    await group.conn.close()


@pytest_asyncio.fixture
async def integration_app(monkeypatch, store_group, activity_client):
    """集成测试用 FastAPI app"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from taskhub.gateway.main import create_app

    app = create_app()
    app.state.store_group = store_group
    app.state.activity_client = activity_client
    app.state.strict_notifications = True
    app.state.overdue_sweeper = None
    return app


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
