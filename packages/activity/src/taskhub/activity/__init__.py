"""TaskHub Activity -- 活动时间线服务通知网关

packages/activity 的公开接口导出。
"""

# 核心组件
from .client import ActivityClient, ActivityNotifier

# 配置
from .config import ActivityClientConfig, load_activity_config

# 异常
from .exceptions import ActivityConfigError, ActivityDeliveryError, ActivityError

__all__ = [
    "ActivityClient",
    "ActivityNotifier",
    "ActivityClientConfig",
    "load_activity_config",
    "ActivityError",
    "ActivityConfigError",
    "ActivityDeliveryError",
]
