"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性、Activity Client 配置、逾期扫描调度状态。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证核心依赖可用性

    检查项：
    1. sqlite: 数据库连通性
    2. activity_client: 下游活动服务地址是否已配置
    3. overdue_sweeper: 调度是否在运行（未启用时为 "disabled"，不影响就绪）
    """
    checks = {}
    all_ok = True

    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except Exception as e:
        log.warning("readiness_sqlite_failed", error=str(e))
        checks["sqlite"] = f"error: {e}"
        all_ok = False

    activity_client = getattr(request.app.state, "activity_client", None)
    if activity_client is not None and activity_client.is_configured:
        checks["activity_client"] = "ok"
    else:
        checks["activity_client"] = "not_configured"
        all_ok = False

    sweeper = getattr(request.app.state, "overdue_sweeper", None)
    if sweeper is None:
        checks["overdue_sweeper"] = "disabled"
    elif sweeper.running:
        checks["overdue_sweeper"] = "ok"
    else:
        checks["overdue_sweeper"] = "stopped"
        all_ok = False

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
