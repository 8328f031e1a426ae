"""TaskHub Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .activity import ActivityEvent, build_activity_event
from .base import CamelModel, to_utc, utc_now
from .enums import (
    OVERDUE_SOURCE_STATES,
    TRANSITIONS,
    ActivityType,
    SortOrder,
    TaskPriority,
    TaskStatus,
    TaskType,
    can_mark_overdue,
    can_transition,
)
from .query import (
    PaginatedTasks,
    PaginationMeta,
    TaskFilterQuery,
    TaskListQuery,
    TaskSortField,
)
from .task import (
    Task,
    TaskCreate,
    TaskDelete,
    TaskLinks,
    TaskStatusUpdate,
    TaskUpdate,
)

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskType",
    "TaskPriority",
    "SortOrder",
    "ActivityType",
    # 状态机
    "TRANSITIONS",
    "OVERDUE_SOURCE_STATES",
    "can_transition",
    "can_mark_overdue",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskStatusUpdate",
    "TaskDelete",
    "TaskLinks",
    # 查询
    "TaskListQuery",
    "TaskFilterQuery",
    "TaskSortField",
    "PaginationMeta",
    "PaginatedTasks",
    # 活动事件
    "ActivityEvent",
    "build_activity_event",
    # 基础
    "CamelModel",
    "to_utc",
    "utc_now",
]
