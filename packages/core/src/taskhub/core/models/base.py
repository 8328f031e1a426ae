"""模型基类与时间工具

对外（HTTP、活动服务）统一使用 camelCase 字段名，Python 内部使用 snake_case。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 别名基类，同时接受字段名和别名"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def to_utc(value: datetime) -> datetime:
    """统一为带时区的 UTC 时间，naive 时间按 UTC 解释"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)
