"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、分页默认值、系统操作者占位等可配置常量。
"""

import os
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKHUB_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKHUB_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskhub.db"),
    )


def get_bool_env(name: str, default: bool) -> bool:
    """读取布尔型环境变量，未设置时返回 default"""
    val = os.environ.get(name)
    if val is None or val.strip() == "":
        return default
    return val.strip().lower() in _TRUE_VALUES


# 分页默认值
DEFAULT_PAGE: int = 1
DEFAULT_PAGE_LIMIT: int = 10

# 未知操作者时写入活动事件的占位身份
SYSTEM_ACTOR: str = "system"

