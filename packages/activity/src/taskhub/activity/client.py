"""ActivityClient -- 活动时间线服务调用封装

单一出站操作：把一条 Activity Event POST 到配置的地址，携带静态 x-api-key。
失败不重试，配置错误与投递失败分别以不同异常抛出。
"""

from typing import Any, Protocol

import httpx
import structlog
from taskhub.core.models import ActivityEvent

from .config import ActivityClientConfig
from .exceptions import ActivityConfigError, ActivityDeliveryError

log = structlog.get_logger()

# 下游错误详情写入日志/异常时的最大长度
_DETAIL_MAX_CHARS = 500


class ActivityNotifier(Protocol):
    """Notification Gateway 接口 -- 接受一条事件，返回下游响应体"""

    async def log_activity(self, event: ActivityEvent) -> Any:
        ...


def _response_detail(response: httpx.Response) -> str:
    """提取下游错误详情（优先 JSON，其次文本）"""
    try:
        detail = response.json()
    except ValueError:
        detail = response.text
    return str(detail)[:_DETAIL_MAX_CHARS]


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ActivityClient:
    """活动服务 HTTP 客户端

    复用一个 httpx.AsyncClient 连接池，关闭时调用 aclose()。
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str = "",
        timeout_s: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """初始化活动服务客户端

        Args:
            base_url: 事件接收地址，None 表示未配置
            api_key: x-api-key 请求头取值
            timeout_s: 请求超时（秒）
            http_client: 外部注入的 httpx 客户端（测试时注入 MockTransport）
        """
        self._base_url = base_url.strip() if base_url else None
        self._api_key = api_key
        self._http = http_client or httpx.AsyncClient(timeout=timeout_s)

    @classmethod
    def from_config(
        cls,
        config: ActivityClientConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ActivityClient":
        return cls(
            base_url=config.base_url,
            api_key=config.api_key.get_secret_value(),
            timeout_s=config.timeout_s,
            http_client=http_client,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    def _endpoint(self) -> str:
        if not self._base_url:
            log.error("activity_client_url_missing", env_var="ACTIVITY_CLIENT_URL")
            raise ActivityConfigError()
        return self._base_url

    async def log_activity(self, event: ActivityEvent) -> Any:
        """投递一条活动事件

        Args:
            event: 活动事件

        Returns:
            下游响应体（JSON 解码，非 JSON 时为文本，空响应为 None）

        Raises:
            ActivityConfigError: 地址未配置（不发起网络请求）
            ActivityDeliveryError: 连接失败、超时或非 2xx 响应
        """
        url = self._endpoint()
        try:
            response = await self._http.post(
                url,
                json=event.to_payload(),
                headers={"x-api-key": self._api_key},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _response_detail(e.response)
            log.error(
                "activity_delivery_failed",
                task_id=event.task_id,
                activity_type=event.activity_type.value,
                status_code=e.response.status_code,
                detail=detail,
            )
            raise ActivityDeliveryError(
                url=url,
                status_code=e.response.status_code,
                detail=detail,
            ) from e
        except httpx.HTTPError as e:
            log.error(
                "activity_delivery_failed",
                task_id=event.task_id,
                activity_type=event.activity_type.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ActivityDeliveryError(url=url, detail=str(e)) from e

        log.debug(
            "activity_logged",
            task_id=event.task_id,
            activity_type=event.activity_type.value,
            status_code=response.status_code,
        )
        return _decode_body(response)

    async def aclose(self) -> None:
        await self._http.aclose()
