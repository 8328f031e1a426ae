"""apps/gateway 测试配置 -- httpx AsyncClient + 临时 DB + 内存活动服务"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskhub.activity import ActivityDeliveryError, ActivityError
from taskhub.core.models import ActivityEvent
from taskhub.core.store import StoreGroup, create_store_group


class FakeActivityClient:
    """内存活动服务：记录收到的事件，可配置为失败

    fail_for: 对这些 task_id 的事件抛出投递失败（None 表示全部）
    """

    def __init__(self) -> None:
        self.events: list[ActivityEvent] = []
        self.attempts: list[ActivityEvent] = []
        self.failing = False
        self.fail_for: set[str] | None = None
        self.error: ActivityError | None = None
        self.is_configured = True
        self.closed = False

    def fail(self, task_ids: set[str] | None = None, error: ActivityError | None = None) -> None:
        self.failing = True
        self.fail_for = task_ids
        self.error = error

    async def log_activity(self, event: ActivityEvent) -> Any:
        self.attempts.append(event)
        if self.failing and (self.fail_for is None or event.task_id in self.fail_for):
            raise self.error or ActivityDeliveryError(url="http://activity.test", status_code=503)
        self.events.append(event)
        return {"ok": True}

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_activity() -> FakeActivityClient:
    return FakeActivityClient()


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    group = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    yield group
    await group.conn.close()


@pytest_asyncio.fixture
async def app(
    monkeypatch: pytest.MonkeyPatch,
    store_group: StoreGroup,
    fake_activity: FakeActivityClient,
):
    """创建测试用 FastAPI app 实例（绕过 lifespan，手动初始化 state）"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from taskhub.gateway.main import create_app

    application = create_app()
    application.state.store_group = store_group
    application.state.activity_client = fake_activity
    application.state.strict_notifications = True
    application.state.overdue_sweeper = None
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
