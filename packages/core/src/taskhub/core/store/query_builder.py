"""Query Builder -- 把列表/跨实体查询参数翻译为 SQL 谓词、排序与窗口

纯函数，不访问数据库。生成的 where 子句只包含占位符，所有值通过 params 传递；
排序字段经白名单映射为列名。
"""

from dataclasses import dataclass

from ..models.enums import SortOrder
from ..models.query import TaskFilterQuery, TaskListQuery, TaskSortField
from ..models.task import TaskLinks

SORT_COLUMNS: dict[TaskSortField, str] = {
    TaskSortField.DUE_DATE: "due_date",
    TaskSortField.CREATED_AT: "created_at",
    TaskSortField.UPDATED_AT: "updated_at",
    TaskSortField.TITLE: "title",
    TaskSortField.PRIORITY: "priority",
    TaskSortField.STATUS: "status",
    TaskSortField.TYPE: "type",
}

_LIKE_ESCAPE = "\\"

# 搜索词在 title / description / assigned_to / contributors 任一命中即可
# casefold 由 init_db 按连接注册，两侧都做 Unicode 大小写折叠
_SEARCH_CLAUSE = (
    "(casefold(title) LIKE ? ESCAPE '\\'"
    " OR casefold(description) LIKE ? ESCAPE '\\'"
    " OR casefold(assigned_to) LIKE ? ESCAPE '\\'"
    " OR EXISTS (SELECT 1 FROM json_each(tasks.contributors)"
    " WHERE casefold(json_each.value) LIKE ? ESCAPE '\\'))"
)


@dataclass(frozen=True, slots=True)
class BuiltQuery:
    """构建结果：谓词 + 参数 + 排序 + 分页窗口"""

    where: str
    params: tuple[str, ...]
    order_by: str
    limit: int
    offset: int


def escape_like(term: str) -> str:
    """转义 LIKE 通配符，使搜索词按字面子串匹配"""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def link_filters(links: TaskLinks) -> list[tuple[str, str | None]]:
    """关联类型 -> 列名 的显式映射"""
    return [
        ("lead_id", links.lead_id),
        ("deal_id", links.deal_id),
        ("contact_id", links.contact_id),
        ("event_id", links.event_id),
        ("note_id", links.note_id),
        ("mail_id", links.mail_id),
        ("linked_task_id", links.linked_task_id),
    ]


def build_task_query(query: TaskListQuery) -> BuiltQuery:
    """构建任务查询

    - 等值条件 AND 组合，缺省或空白值直接省略（不是"匹配空"）
    - search 存在时对四个字段做不区分大小写的子串 OR 匹配
    - include_deleted=False 时排除已软删除任务
    - 排序附加 task_id 作为稳定的次级键

    Args:
        query: TaskListQuery 或 TaskFilterQuery

    Returns:
        BuiltQuery
    """
    clauses: list[str] = []
    params: list[str] = []

    def add_equal(column: str, value: str | None) -> None:
        if value is None or str(value).strip() == "":
            return
        clauses.append(f"{column} = ?")
        params.append(str(value))

    add_equal("status", query.status)
    add_equal("priority", query.priority)
    add_equal("type", query.type)
    add_equal("assigned_to", query.assigned_to)
    add_equal("organization_id", query.organization_id)

    if isinstance(query, TaskFilterQuery):
        for column, value in link_filters(query.links):
            add_equal(column, value)

    if not query.include_deleted:
        clauses.append("deleted_by IS NULL")

    if query.search:
        pattern = f"%{escape_like(query.search.casefold())}%"
        clauses.append(_SEARCH_CLAUSE)
        params.extend([pattern] * 4)

    direction = "ASC" if query.sort_order == SortOrder.ASC else "DESC"
    order_by = f"{SORT_COLUMNS[query.sort_by]} {direction}, task_id {direction}"

    return BuiltQuery(
        where=" AND ".join(clauses) if clauses else "1 = 1",
        params=tuple(params),
        order_by=order_by,
        limit=query.limit,
        offset=query.skip,
    )
