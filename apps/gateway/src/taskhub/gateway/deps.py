"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

StoreGroup / ActivityClient / OverdueSweeper 通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from taskhub.core.store import StoreGroup

from .services.overdue_sweeper import OverdueSweeper
from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_task_service(request: Request) -> TaskService:
    """按请求组装 TaskService（共享连接与 ActivityClient）"""
    state = request.app.state
    return TaskService(
        state.store_group,
        state.activity_client,
        strict_notifications=getattr(state, "strict_notifications", True),
    )


def get_sweeper(request: Request) -> OverdueSweeper | None:
    """从 app.state 获取 OverdueSweeper 实例（未启用时为 None）"""
    return getattr(request.app.state, "overdue_sweeper", None)
