"""ActivityClientConfig -- 活动服务客户端配置加载

从环境变量加载配置；地址缺失不阻塞启动，首次调用时报配置错误。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

_DEFAULT_TIMEOUT_S = 10.0


class ActivityClientConfig(BaseModel):
    """活动服务客户端配置 -- 从环境变量加载

    环境变量:
        ACTIVITY_CLIENT_URL: 活动服务事件接收地址
        X_API_KEY: 静态 API 密钥（x-api-key 请求头）
        TASKHUB_ACTIVITY_TIMEOUT_S: 调用超时（秒，默认 10）
    """

    base_url: str | None = Field(
        default=None,
        description="活动服务事件接收地址",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="x-api-key 请求头取值",
    )
    timeout_s: float = Field(
        default=_DEFAULT_TIMEOUT_S,
        gt=0,
        description="HTTP 调用超时（秒）",
    )


def load_activity_config() -> ActivityClientConfig:
    """从环境变量加载活动服务客户端配置

    环境变量映射:
        ACTIVITY_CLIENT_URL -> base_url (默认 None)
        X_API_KEY -> api_key (默认 "")
        TASKHUB_ACTIVITY_TIMEOUT_S -> timeout_s (默认 10)

    Returns:
        ActivityClientConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("ACTIVITY_CLIENT_URL"):
        kwargs["base_url"] = val

    if val := os.environ.get("X_API_KEY"):
        kwargs["api_key"] = SecretStr(val)

    if val := os.environ.get("TASKHUB_ACTIVITY_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = float(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="TASKHUB_ACTIVITY_TIMEOUT_S",
                value=val,
                fallback=_DEFAULT_TIMEOUT_S,
            )

    return ActivityClientConfig(**kwargs)
