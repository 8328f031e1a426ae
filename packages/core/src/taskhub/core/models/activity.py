"""Activity Event 模型与构造函数

活动事件每次变更时新建，交给 Notification Gateway 后即丢弃，本服务不持久化。
"""

from typing import Any

from pydantic import Field

from ..config import SYSTEM_ACTOR
from .enums import ActivityType
from .task import Task, TaskLinks

_ACTIVITY_VERBS: dict[ActivityType, str] = {
    ActivityType.TASK_CREATED: "created",
    ActivityType.TASK_UPDATED: "updated",
    ActivityType.TASK_DELETED: "deleted",
    ActivityType.TASK_STATUS_CHANGED: "status changed",
}


class ActivityEvent(TaskLinks):
    """发往活动时间线服务的事件

    task_id 永远是事件主体；任务上存在的关联 ID 同时出现在顶层和 metadata 中。
    """

    activity_type: ActivityType = Field(description="活动类型")
    description: str = Field(description="可读描述，包含操作者与动作")
    performed_by: str = Field(default=SYSTEM_ACTOR, description="操作者")
    metadata: dict[str, Any] = Field(default_factory=dict, description="任务摘要与关联 ID")
    task_id: str = Field(description="事件主体任务 ID")

    def to_payload(self) -> dict[str, Any]:
        """序列化为出站 JSON（camelCase，省略空关联）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def build_activity_event(
    task: Task,
    activity_type: ActivityType,
    performed_by: str | None = None,
) -> ActivityEvent:
    """由任务、事件类型、操作者构造活动事件（纯函数）

    Args:
        task: 已持久化的任务
        activity_type: 事件类型
        performed_by: 操作者，为空时记为 system

    Returns:
        ActivityEvent 实例
    """
    actor = performed_by or SYSTEM_ACTOR
    verb = _ACTIVITY_VERBS.get(activity_type, activity_type.value.lower())
    links = task.links
    metadata: dict[str, Any] = {
        "taskTitle": task.title,
        "taskType": task.type.value,
        "dueDate": task.due_date.isoformat(),
        **links.model_dump(by_alias=True, exclude_none=True),
    }
    return ActivityEvent(
        activity_type=activity_type,
        description=f"Task {verb} by {actor}",
        performed_by=actor,
        metadata=metadata,
        task_id=task.task_id,
        **links.model_dump(exclude_none=True),
    )
