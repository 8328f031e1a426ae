"""packages/core 测试配置 -- 核心层 fixture"""

from datetime import UTC, datetime

import aiosqlite
import pytest
import pytest_asyncio
from taskhub.core.models import Task, TaskStatus
from taskhub.core.store.task_store import SqliteTaskStore


@pytest_asyncio.fixture
async def task_store(db_conn: aiosqlite.Connection) -> SqliteTaskStore:
    return SqliteTaskStore(db_conn)


@pytest.fixture
def make_task():
    """任务工厂：按需覆盖字段"""
    counter = 0

    def _make(**overrides) -> Task:
        nonlocal counter
        counter += 1
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        data = {
            "task_id": f"01J0000000000000000000{counter:04d}",
            "title": f"Task {counter}",
            "due_date": datetime(2024, 6, 10, 9, 0, tzinfo=UTC),
            "assigned_to": "alice",
            "organization_id": "org-1",
            "created_by": "alice",
            "status": TaskStatus.PENDING,
            "created_at": now,
            "updated_at": now,
        }
        data.update(overrides)
        return Task(**data)

    return _make
