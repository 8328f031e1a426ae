"""TaskService -- 任务生命周期管理

每个变更操作按固定顺序执行：
1. 持久化写入
2. 构造 Activity Event
3. 调用 Notification Gateway（每次成功变更恰好一次尝试）

严格模式下通知失败会作为整个操作的失败抛给调用方，但写入不回滚。
"""

import structlog
from taskhub.activity import ActivityError, ActivityNotifier
from taskhub.core.exceptions import InvalidStatusTransitionError, TaskNotFoundError
from taskhub.core.models import (
    ActivityType,
    PaginatedTasks,
    PaginationMeta,
    Task,
    TaskCreate,
    TaskFilterQuery,
    TaskListQuery,
    TaskStatusUpdate,
    TaskUpdate,
    build_activity_event,
    can_transition,
    utc_now,
)
from taskhub.core.store import StoreGroup, build_task_query
from ulid import ULID

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        activity_client: ActivityNotifier,
        strict_notifications: bool = True,
    ) -> None:
        self._stores = store_group
        self._activity = activity_client
        self._strict_notifications = strict_notifications

    async def create(self, data: TaskCreate) -> Task:
        """创建任务并发送 TASK_CREATED 通知

        Raises:
            ActivityError: 严格模式下通知失败（任务已创建，不回滚）
        """
        now = utc_now()
        task = Task(
            task_id=str(ULID()),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        await self._stores.task_store.create_task(task)
        log.info(
            "task_created",
            task_id=task.task_id,
            created_by=task.created_by,
            organization_id=task.organization_id,
        )

        await self._notify(task, ActivityType.TASK_CREATED, data.created_by)
        return task

    async def find_by_id(self, task_id: str) -> Task:
        """按 ID 查询任务

        Raises:
            TaskNotFoundError: ID 不存在
        """
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def find_all(self, query: TaskListQuery) -> PaginatedTasks:
        """通用分页列表"""
        return await self._paginate(query)

    async def filter_tasks(self, query: TaskFilterQuery) -> PaginatedTasks:
        """按跨实体关联过滤的分页列表"""
        return await self._paginate(query)

    async def _paginate(self, query: TaskListQuery) -> PaginatedTasks:
        built = build_task_query(query)
        tasks, total = await self._stores.task_store.find_tasks(built)
        return PaginatedTasks(
            data=tasks,
            meta=PaginationMeta.build(total, query.page, query.limit),
        )

    async def update(self, task_id: str, data: TaskUpdate) -> Task:
        """部分更新任务，仅应用显式提供的字段

        Raises:
            TaskNotFoundError: ID 不存在
            ActivityError: 严格模式下通知失败（更新已持久化）
        """
        changes = data.changes()
        task = await self._stores.task_store.update_task(task_id, changes)
        if task is None:
            raise TaskNotFoundError(task_id)
        log.info(
            "task_updated",
            task_id=task_id,
            fields=sorted(changes),
            updated_by=data.updated_by,
        )

        await self._notify(task, ActivityType.TASK_UPDATED, data.updated_by)
        return task

    async def soft_delete(self, task_id: str, deleted_by: str) -> Task:
        """软删除：设置 deleted_by，记录保留

        Raises:
            TaskNotFoundError: ID 不存在
            ActivityError: 严格模式下通知失败
        """
        task = await self._stores.task_store.soft_delete(task_id, deleted_by)
        if task is None:
            raise TaskNotFoundError(task_id)
        log.info("task_deleted", task_id=task_id, deleted_by=deleted_by)

        await self._notify(task, ActivityType.TASK_DELETED, deleted_by)
        return task

    async def update_status(self, task_id: str, data: TaskStatusUpdate) -> Task:
        """显式状态更新 -- 任意状态都可以被覆盖

        发送的是 TASK_UPDATED 而不是 TASK_STATUS_CHANGED。

        Raises:
            TaskNotFoundError: ID 不存在
            InvalidStatusTransitionError: 状态流转不合法
            ActivityError: 严格模式下通知失败
        """
        current = await self._stores.task_store.get_task(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        from_status = current.status
        if not can_transition(from_status, data.status):
            raise InvalidStatusTransitionError(from_status, data.status)

        # 只写 status / updated_by，其余字段保持库中最新值
        changes: dict = {"status": data.status}
        if data.updated_by:
            changes["updated_by"] = data.updated_by
        task = await self._stores.task_store.update_task(task_id, changes)
        if task is None:
            raise TaskNotFoundError(task_id)
        log.info(
            "task_status_updated",
            task_id=task_id,
            from_status=from_status.value,
            to_status=data.status.value,
        )

        await self._notify(task, ActivityType.TASK_UPDATED, data.updated_by)
        return task

    async def _notify(
        self,
        task: Task,
        activity_type: ActivityType,
        performed_by: str | None,
    ) -> None:
        """构造活动事件并调用 Notification Gateway"""
        event = build_activity_event(task, activity_type, performed_by)
        try:
            await self._activity.log_activity(event)
        except ActivityError as e:
            if self._strict_notifications:
                raise
            log.warning(
                "activity_notification_failed",
                task_id=task.task_id,
                activity_type=activity_type.value,
                error_type=type(e).__name__,
            )
