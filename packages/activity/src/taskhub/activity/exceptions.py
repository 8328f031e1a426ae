"""Activity 异常体系"""


class ActivityError(Exception):
    """Activity 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ActivityConfigError(ActivityError):
    """活动服务地址未配置 -- 在任何网络请求之前抛出，不可重试"""

    def __init__(self, message: str = "Activity client base URL is not configured") -> None:
        super().__init__(message, recoverable=False)


class ActivityDeliveryError(ActivityError):
    """活动事件投递失败（连接错误、超时或非 2xx 响应）

    本层不重试，由调用方决定如何处理。
    """

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        detail: str = "",
    ) -> None:
        """
        Args:
            url: 目标地址
            status_code: 下游返回的 HTTP 状态码，连接类错误为 None
            detail: 下游错误详情
        """
        super().__init__(
            f"Failed to log activity: {url} -- {status_code or 'no response'} {detail}".rstrip(),
            recoverable=True,
        )
        self.url = url
        self.status_code = status_code
        self.detail = detail
