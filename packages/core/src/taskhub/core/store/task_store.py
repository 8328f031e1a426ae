"""TaskStore SQLite 实现

提供文档式 CRUD：创建、按 ID 读取、谓词查询 + 计数、按 ID 部分合并更新、
按 ID 集合批量更新状态。每个写操作单语句单事务提交。
"""

import asyncio
import json
from collections.abc import Iterable
from datetime import datetime, timedelta

import aiosqlite

from ..models.base import to_utc, utc_now
from ..models.enums import TaskStatus
from ..models.task import Task
from .query_builder import BuiltQuery

_COLUMNS: tuple[str, ...] = (
    "task_id",
    "title",
    "description",
    "type",
    "status",
    "priority",
    "due_date",
    "assigned_to",
    "contributors",
    "created_by",
    "updated_by",
    "deleted_by",
    "organization_id",
    "lead_id",
    "deal_id",
    "contact_id",
    "event_id",
    "note_id",
    "mail_id",
    "linked_task_id",
    "created_at",
    "updated_at",
)

_SELECT_COLUMNS = ", ".join(_COLUMNS)

# 允许部分更新的列；task_id / created_by / organization_id / created_at 不可变
_MUTABLE_COLUMNS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "type",
        "status",
        "priority",
        "due_date",
        "assigned_to",
        "contributors",
        "updated_by",
        "deleted_by",
        "lead_id",
        "deal_id",
        "contact_id",
        "event_id",
        "note_id",
        "mail_id",
        "linked_task_id",
    }
)


def format_ts(value: datetime) -> str:
    """时间统一存为 UTC 微秒精度 ISO 字符串，字符串序即时间序"""
    return to_utc(value).isoformat(timespec="microseconds")


def _to_db_value(column: str, value):
    if value is None:
        return None
    if column == "contributors":
        return json.dumps(list(value), ensure_ascii=False)
    if isinstance(value, datetime):
        return format_ts(value)
    return str(value)


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        values = task.model_dump()
        placeholders = ", ".join("?" for _ in _COLUMNS)
        try:
            await self._conn.execute(
                f"INSERT INTO tasks ({_SELECT_COLUMNS}) VALUES ({placeholders})",
                tuple(_to_db_value(col, values[col]) for col in _COLUMNS),
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def find_tasks(self, built: BuiltQuery) -> tuple[list[Task], int]:
        """按构建好的查询取分页窗口，并发计算同一谓词下的总数"""
        rows, total = await asyncio.gather(
            self._fetch_window(built),
            self.count_tasks(built),
        )
        return [self._row_to_task(row) for row in rows], total

    async def count_tasks(self, built: BuiltQuery) -> int:
        cursor = await self._conn.execute(
            f"SELECT COUNT(*) FROM tasks WHERE {built.where}",
            built.params,
        )
        row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def _fetch_window(self, built: BuiltQuery):
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM tasks WHERE {built.where} "
            f"ORDER BY {built.order_by} LIMIT ? OFFSET ?",
            (*built.params, built.limit, built.offset),
        )
        return await cursor.fetchall()

    async def update_task(
        self,
        task_id: str,
        changes: dict,
        updated_at: datetime | None = None,
    ) -> Task | None:
        """按 ID 部分合并更新，返回更新后的任务；ID 不存在返回 None

        Raises:
            ValueError: changes 中包含不可变或未知列
        """
        unknown = set(changes) - _MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        assignments = [f"{col} = ?" for col in changes] + ["updated_at = ?"]
        params = [_to_db_value(col, val) for col, val in changes.items()]
        params.append(format_ts(updated_at or utc_now()))
        params.append(task_id)

        try:
            cursor = await self._conn.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE task_id = ?",
                tuple(params),
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

        if cursor.rowcount == 0:
            return None
        return await self.get_task(task_id)

    async def soft_delete(self, task_id: str, deleted_by: str) -> Task | None:
        """软删除：仅设置 deleted_by，记录保留"""
        return await self.update_task(task_id, {"deleted_by": deleted_by})

    async def find_overdue_candidates(
        self,
        now: datetime,
        window: timedelta,
    ) -> list[Task]:
        """查询刚刚过期的 Pending 任务：now - window <= due_date < now

        已软删除的任务不参与扫描。
        """
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM tasks "
            "WHERE status = ? AND due_date < ? AND due_date >= ? "
            "AND deleted_by IS NULL ORDER BY due_date ASC",
            (
                TaskStatus.PENDING.value,
                format_ts(now),
                format_ts(now - window),
            ),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update_tasks_status(
        self,
        task_ids: Iterable[str],
        status: TaskStatus,
        expected_status: TaskStatus | None = None,
    ) -> list[str]:
        """按 ID 集合批量更新状态（单条 UPDATE，原子提交）

        Args:
            task_ids: 目标任务 ID
            status: 新状态
            expected_status: 仅当当前状态等于该值时才更新

        Returns:
            实际被修改的任务 ID
        """
        ids = list(dict.fromkeys(task_ids))
        if not ids:
            return []

        placeholders = ", ".join("?" for _ in ids)
        sql = f"UPDATE tasks SET status = ?, updated_at = ? WHERE task_id IN ({placeholders})"
        params: list[str] = [status.value, format_ts(utc_now()), *ids]
        if expected_status is not None:
            sql += " AND status = ?"
            params.append(expected_status.value)
        sql += " RETURNING task_id"

        try:
            cursor = await self._conn.execute(sql, tuple(params))
            rows = await cursor.fetchall()
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        return [row[0] for row in rows]

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        data = dict(zip(_COLUMNS, tuple(row), strict=True))
        data["contributors"] = json.loads(data["contributors"] or "[]")
        return Task(**data)
