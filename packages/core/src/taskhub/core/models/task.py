"""Task Domain Model

tasks 表中的每一行对应一个 Task；删除为软删除（设置 deleted_by），
记录永远不会被物理移除。
"""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator, model_validator

from .base import CamelModel, to_utc
from .enums import TaskPriority, TaskStatus, TaskType


class TaskLinks(CamelModel):
    """跨实体关联 -- 每种外部引用一个可选字段

    关联仅按不透明 ID 字符串保存，不拥有被引用实体。
    linked_task_id 是外部"任务"引用，与活动事件的主体 taskId 区分开。
    """

    lead_id: str | None = Field(default=None, description="关联线索 ID")
    deal_id: str | None = Field(default=None, description="关联商机 ID")
    contact_id: str | None = Field(default=None, description="关联联系人 ID")
    event_id: str | None = Field(default=None, description="关联日历事件 ID")
    note_id: str | None = Field(default=None, description="关联笔记 ID")
    mail_id: str | None = Field(default=None, description="关联邮件 ID")
    linked_task_id: str | None = Field(default=None, description="外部任务引用 ID")


class TaskCreate(TaskLinks):
    """创建任务请求体"""

    title: str = Field(min_length=1, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    type: TaskType = Field(default=TaskType.REMINDER, description="任务类型")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="初始状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    due_date: datetime = Field(description="截止时间")
    assigned_to: str = Field(min_length=1, description="负责人")
    contributors: list[str] = Field(default_factory=list, description="协作者，保序去重")
    organization_id: str = Field(min_length=1, description="所属组织")
    created_by: str = Field(min_length=1, description="创建者")

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @field_validator("contributors")
    @classmethod
    def _dedupe_contributors(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class Task(TaskCreate):
    """Task 数据模型

    created_by、organization_id 创建后不可变；
    updated_by / deleted_by 记录最后一次操作者。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    updated_by: str | None = Field(default=None, description="最后更新者")
    deleted_by: str | None = Field(default=None, description="软删除操作者")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

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

    @property
    def is_deleted(self) -> bool:
        return self.deleted_by is not None


# 部分更新时不允许显式置空的字段
_NON_NULLABLE_UPDATE_FIELDS = (
    "title",
    "type",
    "status",
    "priority",
    "due_date",
    "assigned_to",
    "contributors",
)


class TaskUpdate(TaskLinks):
    """部分更新请求体 -- 仅应用显式提供的字段

    created_by、organization_id 不可变，出现即拒绝。
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    type: TaskType | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assigned_to: str | None = Field(default=None, min_length=1)
    contributors: list[str] | None = None
    updated_by: str | None = None

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime | None) -> datetime | None:
        return to_utc(value) if value is not None else None

    @field_validator("contributors")
    @classmethod
    def _dedupe_contributors(cls, value: list[str] | None) -> list[str] | None:
        return list(dict.fromkeys(value)) if value is not None else None

    @model_validator(mode="after")
    def _reject_nulls(self) -> "TaskUpdate":
        for name in _NON_NULLABLE_UPDATE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """返回显式提供的字段（snake_case）"""
        return self.model_dump(exclude_unset=True)


class TaskStatusUpdate(CamelModel):
    """状态更新请求体"""

    status: TaskStatus = Field(description="新状态")
    updated_by: str | None = Field(default=None, description="操作者")


class TaskDelete(CamelModel):
    """软删除请求体"""

    deleted_by: str = Field(min_length=1, description="删除操作者")
