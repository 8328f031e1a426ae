"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Protocol

from ..models.enums import TaskStatus
from ..models.task import Task
from .query_builder import BuiltQuery


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def find_tasks(self, built: BuiltQuery) -> tuple[list[Task], int]:
        """按谓词查询分页窗口，同时返回总数"""
        ...

    async def update_task(
        self,
        task_id: str,
        changes: dict,
        updated_at: datetime | None = None,
    ) -> Task | None:
        """按 ID 部分合并更新"""
        ...

    async def soft_delete(self, task_id: str, deleted_by: str) -> Task | None:
        """软删除"""
        ...

    async def find_overdue_candidates(
        self,
        now: datetime,
        window: timedelta,
    ) -> list[Task]:
        """查询刚刚过期的 Pending 任务"""
        ...

    async def update_tasks_status(
        self,
        task_ids: Iterable[str],
        status: TaskStatus,
        expected_status: TaskStatus | None = None,
    ) -> list[str]:
        """按 ID 集合批量更新状态"""
        ...
