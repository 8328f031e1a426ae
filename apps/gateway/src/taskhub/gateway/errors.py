"""异常 -> HTTP 响应映射

错误响应统一为 {"error": {"code", "message"}}：
- TaskNotFoundError -> 404 TASK_NOT_FOUND
- ActivityConfigError -> 500 ACTIVITY_NOT_CONFIGURED
- ActivityDeliveryError -> 500 ACTIVITY_DELIVERY_FAILED
- InvalidStatusTransitionError -> 409 INVALID_STATUS_TRANSITION
"""

import structlog
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse
from taskhub.activity import ActivityConfigError, ActivityDeliveryError
from taskhub.core.exceptions import InvalidStatusTransitionError, TaskNotFoundError

log = structlog.get_logger()


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def _task_not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
    return error_response(404, "TASK_NOT_FOUND", str(exc))


async def _activity_not_configured(
    request: Request, exc: ActivityConfigError
) -> JSONResponse:
    return error_response(500, "ACTIVITY_NOT_CONFIGURED", str(exc))


async def _activity_delivery_failed(
    request: Request, exc: ActivityDeliveryError
) -> JSONResponse:
    # 写入已成功，只是下游通知失败；不向调用方暴露下游细节
    log.warning(
        "mutation_reported_failed_after_write",
        path=request.url.path,
        status_code=exc.status_code,
    )
    return error_response(500, "ACTIVITY_DELIVERY_FAILED", "Failed to log activity")


async def _invalid_transition(
    request: Request, exc: InvalidStatusTransitionError
) -> JSONResponse:
    return error_response(409, "INVALID_STATUS_TRANSITION", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """注册领域异常处理器"""
    app.add_exception_handler(TaskNotFoundError, _task_not_found)
    app.add_exception_handler(ActivityConfigError, _activity_not_configured)
    app.add_exception_handler(ActivityDeliveryError, _activity_delivery_failed)
    app.add_exception_handler(InvalidStatusTransitionError, _invalid_transition)
