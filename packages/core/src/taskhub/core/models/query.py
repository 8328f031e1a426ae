"""列表查询与分页信封模型

TaskListQuery 服务通用列表；TaskFilterQuery 额外携带跨实体关联过滤。
"""

import math
from enum import StrEnum

from pydantic import Field

from ..config import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from .base import CamelModel
from .enums import SortOrder, TaskPriority, TaskStatus, TaskType
from .task import Task, TaskLinks


class TaskSortField(StrEnum):
    """允许排序的字段（对外 camelCase 名称）"""

    DUE_DATE = "dueDate"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"
    PRIORITY = "priority"
    STATUS = "status"
    TYPE = "type"


class TaskListQuery(CamelModel):
    """通用列表查询参数"""

    page: int = Field(default=DEFAULT_PAGE, ge=1, description="页码，从 1 开始")
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, description="每页条数")
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    type: TaskType | None = None
    assigned_to: str | None = None
    organization_id: str | None = None
    sort_by: TaskSortField = Field(default=TaskSortField.DUE_DATE)
    sort_order: SortOrder = Field(default=SortOrder.DESC)
    search: str | None = Field(
        default=None,
        description="在标题、描述、负责人、协作者中做不区分大小写的子串匹配",
    )
    include_deleted: bool = Field(default=False, description="是否包含已软删除的任务")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class TaskFilterQuery(TaskListQuery, TaskLinks):
    """跨实体过滤查询 -- 关联 ID 与其他条件一起 AND 组合"""

    @property
    def links(self) -> TaskLinks:
        return TaskLinks(
            lead_id=self.lead_id,
            deal_id=self.deal_id,
            contact_id=self.contact_id,
            event_id=self.event_id,
            note_id=self.note_id,
            mail_id=self.mail_id,
            linked_task_id=self.linked_task_id,
        )


class PaginationMeta(CamelModel):
    """分页元数据"""

    total: int
    page: int
    last_page: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        """由总数、页码、每页条数推导分页元数据

        total=0 时 last_page=0，前后翻页标志均为 False。
        """
        last_page = math.ceil(total / limit) if total > 0 else 0
        return cls(
            total=total,
            page=page,
            last_page=last_page,
            has_next_page=page < last_page,
            has_previous_page=page > 1 and last_page > 0,
        )


class PaginatedTasks(CamelModel):
    """分页信封 {data, meta}"""

    data: list[Task]
    meta: PaginationMeta
