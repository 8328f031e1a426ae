"""任务路由 -- /api/v1/tasks

POST   /api/v1/tasks               创建任务
GET    /api/v1/tasks               分页列表（过滤 + 排序 + 搜索）
POST   /api/v1/tasks/filter        跨实体关联过滤
GET    /api/v1/tasks/{task_id}     详情
PUT    /api/v1/tasks/{task_id}     部分更新
DELETE /api/v1/tasks/{task_id}     软删除
PATCH  /api/v1/tasks/{task_id}/status  状态更新
"""

from fastapi import APIRouter, Depends, Query
from taskhub.core.config import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from taskhub.core.models import (
    PaginatedTasks,
    SortOrder,
    Task,
    TaskCreate,
    TaskDelete,
    TaskFilterQuery,
    TaskListQuery,
    TaskPriority,
    TaskSortField,
    TaskStatus,
    TaskStatusUpdate,
    TaskType,
    TaskUpdate,
)

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks")


def _list_query(
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1),
    status: TaskStatus | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
    type: TaskType | None = Query(default=None),
    assigned_to: str | None = Query(default=None, alias="assignedTo"),
    organization_id: str | None = Query(default=None, alias="organizationId"),
    sort_by: TaskSortField = Query(default=TaskSortField.DUE_DATE, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.DESC, alias="sortOrder"),
    search: str | None = Query(default=None),
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
) -> TaskListQuery:
    return TaskListQuery(
        page=page,
        limit=limit,
        status=status,
        priority=priority,
        type=type,
        assigned_to=assigned_to,
        organization_id=organization_id,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        include_deleted=include_deleted,
    )


@router.post("", response_model=Task, status_code=201)
async def create_task(
    data: TaskCreate,
    service: TaskService = Depends(get_task_service),
):
    """创建任务，成功后发送 TASK_CREATED 活动"""
    return await service.create(data)


@router.get("", response_model=PaginatedTasks)
async def list_tasks(
    query: TaskListQuery = Depends(_list_query),
    service: TaskService = Depends(get_task_service),
):
    """分页查询任务列表，默认按 dueDate 倒序"""
    return await service.find_all(query)


# 必须在 /{task_id} 之前声明
@router.post("/filter", response_model=PaginatedTasks)
async def filter_tasks(
    query: TaskFilterQuery,
    service: TaskService = Depends(get_task_service),
):
    """按 leadId / dealId / contactId 等关联 ID 过滤"""
    return await service.filter_tasks(query)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    return await service.find_by_id(task_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    """部分更新，仅应用请求体中显式出现的字段"""
    return await service.update(task_id, data)


@router.delete("/{task_id}", response_model=Task)
async def delete_task(
    task_id: str,
    data: TaskDelete,
    service: TaskService = Depends(get_task_service),
):
    """软删除；请求体必须提供 deletedBy"""
    return await service.soft_delete(task_id, data.deleted_by)


@router.patch("/{task_id}/status", response_model=Task)
async def update_task_status(
    task_id: str,
    data: TaskStatusUpdate,
    service: TaskService = Depends(get_task_service),
):
    return await service.update_status(task_id, data)
