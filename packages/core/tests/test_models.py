"""Domain Model 单元测试

测试内容：
1. TaskCreate 默认值、校验、协作者去重、due_date 归一化为 UTC
2. camelCase 别名的输入输出
3. TaskUpdate 的部分更新语义
4. PaginationMeta 推导
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError
from taskhub.core.models import (
    PaginationMeta,
    Task,
    TaskCreate,
    TaskDelete,
    TaskFilterQuery,
    TaskListQuery,
    TaskPriority,
    TaskSortField,
    TaskStatus,
    TaskType,
    TaskUpdate,
)

_CREATE_BODY = {
    "title": "Call the client",
    "dueDate": "2024-06-10T09:00:00Z",
    "assignedTo": "alice",
    "organizationId": "org-1",
    "createdBy": "alice",
}


class TestTaskCreate:
    """创建请求体"""

    def test_defaults(self):
        data = TaskCreate.model_validate(_CREATE_BODY)
        assert data.type == TaskType.REMINDER
        assert data.status == TaskStatus.PENDING
        assert data.priority == TaskPriority.MEDIUM
        assert data.contributors == []
        assert data.lead_id is None

    def test_accepts_field_names(self):
        data = TaskCreate(
            title="x",
            due_date=datetime(2024, 6, 10, tzinfo=UTC),
            assigned_to="alice",
            organization_id="org-1",
            created_by="alice",
        )
        assert data.assigned_to == "alice"

    @pytest.mark.parametrize(
        "field", ["title", "dueDate", "assignedTo", "organizationId", "createdBy"]
    )
    def test_required_fields(self, field: str):
        body = {k: v for k, v in _CREATE_BODY.items() if k != field}
        with pytest.raises(ValidationError):
            TaskCreate.model_validate(body)

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate({**_CREATE_BODY, "title": ""})

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate({**_CREATE_BODY, "status": "Cancelled"})

    def test_contributors_deduplicated_in_order(self):
        data = TaskCreate.model_validate(
            {**_CREATE_BODY, "contributors": ["bob", "carol", "bob", "dave", "carol"]}
        )
        assert data.contributors == ["bob", "carol", "dave"]

    def test_due_date_normalized_to_utc(self):
        offset = timezone(timedelta(hours=8))
        data = TaskCreate.model_validate(
            {**_CREATE_BODY, "dueDate": datetime(2024, 6, 10, 17, 0, tzinfo=offset)}
        )
        assert data.due_date == datetime(2024, 6, 10, 9, 0, tzinfo=UTC)
        assert data.due_date.utcoffset() == timedelta(0)

    def test_naive_due_date_treated_as_utc(self):
        data = TaskCreate.model_validate({**_CREATE_BODY, "dueDate": "2024-06-10T09:00:00"})
        assert data.due_date.tzinfo is not None
        assert data.due_date.hour == 9


class TestTaskSerialization:
    """对外 camelCase 输出"""

    def test_dump_by_alias(self, make_task):
        task = make_task(lead_id="lead-1", linked_task_id="ext-1")
        payload = task.model_dump(mode="json", by_alias=True)
        assert payload["taskId"] == task.task_id
        assert payload["leadId"] == "lead-1"
        assert payload["linkedTaskId"] == "ext-1"
        assert payload["dueDate"].startswith("2024-06-10T09:00:00")
        assert "due_date" not in payload

    def test_links_and_deleted_flag(self, make_task):
        task = make_task(deal_id="deal-9")
        assert task.links.deal_id == "deal-9"
        assert task.links.lead_id is None
        assert task.is_deleted is False
        assert make_task(deleted_by="bob").is_deleted is True


class TestTaskUpdate:
    """部分更新请求体"""

    def test_changes_only_explicit_fields(self):
        data = TaskUpdate.model_validate({"title": "New title", "description": None})
        assert data.changes() == {"title": "New title", "description": None}

    def test_empty_body_has_no_changes(self):
        assert TaskUpdate.model_validate({}).changes() == {}

    def test_camel_case_keys_map_to_columns(self):
        data = TaskUpdate.model_validate({"assignedTo": "bob", "updatedBy": "carol"})
        assert data.changes() == {"assigned_to": "bob", "updated_by": "carol"}

    @pytest.mark.parametrize("field", ["createdBy", "organizationId", "taskId"])
    def test_immutable_fields_rejected(self, field: str):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({field: "x"})

    @pytest.mark.parametrize(
        "field", ["title", "dueDate", "assignedTo", "status", "priority", "contributors"]
    )
    def test_required_fields_cannot_be_nulled(self, field: str):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({field: None})

    def test_contributors_deduplicated(self):
        data = TaskUpdate.model_validate({"contributors": ["a", "a", "b"]})
        assert data.changes() == {"contributors": ["a", "b"]}


class TestTaskDelete:
    def test_deleted_by_required_non_empty(self):
        with pytest.raises(ValidationError):
            TaskDelete.model_validate({"deletedBy": ""})
        assert TaskDelete.model_validate({"deletedBy": "bob"}).deleted_by == "bob"


class TestQueryModels:
    """列表与过滤查询"""

    def test_list_defaults(self):
        query = TaskListQuery()
        assert query.page == 1
        assert query.limit == 10
        assert query.sort_by == TaskSortField.DUE_DATE
        assert query.sort_order == "desc"
        assert query.include_deleted is False
        assert query.skip == 0

    def test_skip(self):
        assert TaskListQuery(page=3, limit=20).skip == 40

    @pytest.mark.parametrize("field,value", [("page", 0), ("limit", 0), ("page", -1)])
    def test_non_positive_window_rejected(self, field: str, value: int):
        with pytest.raises(ValidationError):
            TaskListQuery.model_validate({field: value})

    def test_unknown_sort_field_rejected(self):
        with pytest.raises(ValidationError):
            TaskListQuery.model_validate({"sortBy": "password"})

    def test_filter_query_links(self):
        query = TaskFilterQuery.model_validate({"leadId": "lead-1", "page": 2})
        assert query.links.lead_id == "lead-1"
        assert query.page == 2


class TestPaginationMeta:
    """分页元数据推导"""

    @pytest.mark.parametrize(
        "total,page,limit,last_page,has_next,has_prev",
        [
            (0, 1, 10, 0, False, False),
            (5, 1, 10, 1, False, False),
            (10, 1, 10, 1, False, False),
            (11, 1, 10, 2, True, False),
            (11, 2, 10, 2, False, True),
            (30, 2, 10, 3, True, True),
            (0, 2, 10, 0, False, False),
        ],
    )
    def test_build(self, total, page, limit, last_page, has_next, has_prev):
        meta = PaginationMeta.build(total, page, limit)
        assert meta.total == total
        assert meta.page == page
        assert meta.last_page == last_page
        assert meta.has_next_page is has_next
        assert meta.has_previous_page is has_prev

    def test_camel_case_output(self):
        payload = PaginationMeta.build(11, 1, 10).model_dump(by_alias=True)
        assert payload == {
            "total": 11,
            "page": 1,
            "lastPage": 2,
            "hasNextPage": True,
            "hasPreviousPage": False,
        }


def test_task_requires_identity(make_task):
    task = make_task()
    with pytest.raises(ValidationError):
        Task.model_validate({k: v for k, v in task.model_dump().items() if k != "task_id"})
