"""枚举定义 -- Task 分类、状态机、排序方向与活动事件类型

包含 TaskStatus 状态机、TaskType、TaskPriority、SortOrder、ActivityType 枚举，
以及 TRANSITIONS 合法流转映射和 OVERDUE_SOURCE_STATES 逾期扫描源状态集合。
"""

from enum import StrEnum


class TaskType(StrEnum):
    """任务类型"""

    CALL = "Call"
    EMAIL = "Email"
    MEETING = "Meeting"
    REMINDER = "Reminder"
    OTHER = "Other"


class TaskStatus(StrEnum):
    """Task 状态机

    Pending 为初始状态；没有强制终态，所有状态都接受显式状态更新。
    """

    PENDING = "Pending"
    COMPLETED = "Completed"
    OVERDUE = "Overdue"


class TaskPriority(StrEnum):
    """任务优先级"""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SortOrder(StrEnum):
    """排序方向"""

    ASC = "asc"
    DESC = "desc"


# 显式状态更新允许流转到任意目标（包括"取消完成"和恢复逾期任务）
TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    status: set(TaskStatus) for status in TaskStatus
}

# 逾期扫描只会把这些状态推进到 OVERDUE
OVERDUE_SOURCE_STATES: set[TaskStatus] = {TaskStatus.PENDING}


class ActivityType(StrEnum):
    """活动事件类型 -- 封闭枚举

    除 TASK_* 外的类型为其他实体预留，本服务不产生。
    """

    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_DELETED = "TASK_DELETED"
    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"

    # 其他实体预留
    LEAD_CREATED = "LEAD_CREATED"
    LEAD_UPDATED = "LEAD_UPDATED"
    LEAD_DELETED = "LEAD_DELETED"
    DEAL_CREATED = "DEAL_CREATED"
    DEAL_UPDATED = "DEAL_UPDATED"
    DEAL_DELETED = "DEAL_DELETED"
    CONTACT_CREATED = "CONTACT_CREATED"
    CONTACT_UPDATED = "CONTACT_UPDATED"
    CONTACT_DELETED = "CONTACT_DELETED"
    CALENDAR_EVENT_CREATED = "CALENDAR_EVENT_CREATED"
    CALENDAR_EVENT_UPDATED = "CALENDAR_EVENT_UPDATED"
    CALENDAR_EVENT_DELETED = "CALENDAR_EVENT_DELETED"
    NOTE_CREATED = "NOTE_CREATED"
    NOTE_UPDATED = "NOTE_UPDATED"
    NOTE_DELETED = "NOTE_DELETED"
    MAIL_CREATED = "MAIL_CREATED"
    MAIL_UPDATED = "MAIL_UPDATED"
    MAIL_DELETED = "MAIL_DELETED"


def can_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """验证显式状态更新是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = TRANSITIONS.get(from_status, set())
    return to_status in allowed


def can_mark_overdue(status: TaskStatus) -> bool:
    """逾期扫描是否允许把该状态推进到 OVERDUE"""
    return status in OVERDUE_SOURCE_STATES
