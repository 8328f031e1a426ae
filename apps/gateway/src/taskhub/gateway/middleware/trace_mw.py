"""TraceMiddleware -- 任务级追踪

针对单个任务的请求（/api/v1/tasks/{task_id}[/status]）绑定 task_id 与 trace_id，
贯穿该请求内的服务层与通知网关日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

TASKS_PATH_PREFIX = "/api/v1/tasks/"

# 集合级子路由，不是 task_id
_COLLECTION_ROUTES = {"filter"}


def extract_task_id(path: str) -> str | None:
    """从请求路径中提取 task_id，不是单任务路由时返回 None"""
    if not path.startswith(TASKS_PATH_PREFIX):
        return None
    segment = path[len(TASKS_PATH_PREFIX):].split("/", 1)[0]
    if not segment or segment in _COLLECTION_ROUTES:
        return None
    return segment


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(
                task_id=task_id,
                trace_id=f"trace-{task_id}",
            )

        return await call_next(request)
