"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + Activity Client 初始化 + 逾期扫描调度 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskhub.activity import ActivityClient, load_activity_config
from taskhub.core.config import get_bool_env, get_db_path
from taskhub.core.store import create_store_group

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, tasks
from .services.overdue_sweeper import OverdueSweeper, load_sweeper_config

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB、Activity Client 和扫描调度，关闭时按相反顺序清理"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    activity_config = load_activity_config()
    activity_client = ActivityClient.from_config(activity_config)
    app.state.activity_client = activity_client
    if not activity_client.is_configured:
        # 启动不失败；每次变更操作会以 ACTIVITY_NOT_CONFIGURED 报错
        log.warning("activity_client_not_configured", env_var="ACTIVITY_CLIENT_URL")
    else:
        log.info(
            "activity_client_initialized",
            base_url=activity_config.base_url,
            timeout_s=activity_config.timeout_s,
        )

    app.state.strict_notifications = get_bool_env("TASKHUB_STRICT_NOTIFICATIONS", True)

    sweeper_config = load_sweeper_config()
    sweeper = None
    if sweeper_config.enabled:
        sweeper = OverdueSweeper.from_config(
            sweeper_config, store_group.task_store, activity_client
        )
        sweeper.start()
    else:
        log.info("overdue_sweeper_disabled")
    app.state.overdue_sweeper = sweeper

    yield

    if sweeper is not None:
        await sweeper.stop()
    await activity_client.aclose()
    await store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskHub Gateway",
        version="0.1.0",
        description="CRM 任务生命周期 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire()

    register_exception_handlers(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
