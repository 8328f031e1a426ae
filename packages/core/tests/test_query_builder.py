"""Query Builder 单元测试

纯函数测试，不访问数据库：
1. 缺省/空白过滤条件被省略
2. 关联过滤只在 TaskFilterQuery 上生效
3. 搜索转义 LIKE 通配符
4. 排序白名单 + task_id 次级键
5. 分页窗口
"""

import pytest
from taskhub.core.models import (
    SortOrder,
    TaskFilterQuery,
    TaskListQuery,
    TaskSortField,
    TaskStatus,
)
from taskhub.core.store.query_builder import SORT_COLUMNS, build_task_query, escape_like


class TestPredicates:
    """过滤谓词"""

    def test_empty_query_only_excludes_deleted(self):
        built = build_task_query(TaskListQuery())
        assert built.where == "deleted_by IS NULL"
        assert built.params == ()

    def test_include_deleted_matches_everything(self):
        built = build_task_query(TaskListQuery(include_deleted=True))
        assert built.where == "1 = 1"
        assert built.params == ()

    def test_equality_filters_combined_with_and(self):
        built = build_task_query(
            TaskListQuery(status=TaskStatus.PENDING, assigned_to="alice", organization_id="org-1")
        )
        assert built.where == (
            "status = ? AND assigned_to = ? AND organization_id = ? AND deleted_by IS NULL"
        )
        assert built.params == ("Pending", "alice", "org-1")

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_values_are_omitted(self, blank: str):
        """空白值表示不过滤，而不是匹配空值"""
        built = build_task_query(TaskListQuery(assigned_to=blank, organization_id=blank))
        assert "assigned_to" not in built.where
        assert "organization_id" not in built.where
        assert built.params == ()

    def test_link_filters_on_filter_query(self):
        built = build_task_query(TaskFilterQuery(lead_id="lead-1", deal_id="deal-2"))
        assert "lead_id = ?" in built.where
        assert "deal_id = ?" in built.where
        assert "contact_id" not in built.where
        assert built.params == ("lead-1", "deal-2")

    def test_linked_task_filter(self):
        built = build_task_query(TaskFilterQuery(linked_task_id="ext-7"))
        assert "linked_task_id = ?" in built.where
        assert built.params == ("ext-7",)

    def test_values_never_inlined(self):
        built = build_task_query(TaskListQuery(assigned_to="x' OR '1'='1"))
        assert "'1'='1" not in built.where
        assert built.params == ("x' OR '1'='1",)


class TestSearch:
    """关键字搜索"""

    def test_search_covers_four_fields(self):
        built = build_task_query(TaskListQuery(search="call"))
        for column in ("title", "description", "assigned_to", "json_each.value"):
            assert f"casefold({column}) LIKE" in built.where
        assert built.params == ("%call%",) * 4

    def test_search_term_casefolded(self):
        built = build_task_query(TaskListQuery(search="ÜBERPRÜFUNG Straße"))
        assert built.params == ("%überprüfung strasse%",) * 4

    def test_search_and_filters_combined(self):
        built = build_task_query(TaskListQuery(search="call", status=TaskStatus.OVERDUE))
        assert built.where.startswith("status = ? AND deleted_by IS NULL AND (")
        assert built.params[0] == "Overdue"

    @pytest.mark.parametrize(
        "term,escaped",
        [
            ("50%", "50\\%"),
            ("a_b", "a\\_b"),
            ("back\\slash", "back\\\\slash"),
            ("plain", "plain"),
        ],
    )
    def test_escape_like(self, term: str, escaped: str):
        assert escape_like(term) == escaped


class TestOrderingAndWindow:
    """排序与分页窗口"""

    def test_default_order(self):
        built = build_task_query(TaskListQuery())
        assert built.order_by == "due_date DESC, task_id DESC"

    def test_ascending(self):
        built = build_task_query(
            TaskListQuery(sort_by=TaskSortField.CREATED_AT, sort_order=SortOrder.ASC)
        )
        assert built.order_by == "created_at ASC, task_id ASC"

    def test_every_sort_field_is_mapped(self):
        assert set(SORT_COLUMNS) == set(TaskSortField)

    @pytest.mark.parametrize(
        "page,limit,offset",
        [(1, 10, 0), (2, 10, 10), (3, 25, 50)],
    )
    def test_window(self, page: int, limit: int, offset: int):
        built = build_task_query(TaskListQuery(page=page, limit=limit))
        assert built.limit == limit
        assert built.offset == offset
