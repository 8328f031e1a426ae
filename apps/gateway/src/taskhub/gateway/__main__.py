"""CLI 入口模块 -- python -m taskhub.gateway <command>

支持的命令：
  serve          启动 HTTP 服务（uvicorn）
  init-db        创建数据库 schema（幂等）
  sweep-overdue  立即执行一次逾期扫描（供外部调度器调用）
"""

import asyncio
import os
import sys

import uvicorn
from taskhub.activity import ActivityClient, load_activity_config
from taskhub.core.config import get_db_path
from taskhub.core.store import create_store_group

from .middleware.logging_config import setup_logging
from .services.overdue_sweeper import OverdueSweeper, load_sweeper_config

_USAGE = """用法: python -m taskhub.gateway <command>
命令:
  serve          启动 HTTP 服务
  init-db        创建数据库 schema
  sweep-overdue  立即执行一次逾期扫描"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]
    setup_logging()

    if command == "serve":
        serve()
    elif command == "init-db":
        asyncio.run(init_db())
    elif command == "sweep-overdue":
        exit_code = asyncio.run(sweep_overdue())
        sys.exit(exit_code)
    else:
        print(f"未知命令: {command}")
        print(_USAGE)
        sys.exit(1)


def serve() -> None:
    """启动 HTTP 服务

    环境变量 TASKHUB_HOST / TASKHUB_PORT 控制监听地址（默认 127.0.0.1:8000）。
    """
    uvicorn.run(
        "taskhub.gateway.main:app",
        host=os.environ.get("TASKHUB_HOST", "127.0.0.1"),
        port=int(os.environ.get("TASKHUB_PORT", "8000")),
        log_config=None,
    )


async def init_db() -> None:
    """初始化数据库"""
    db_path = get_db_path()
    print(f"数据库路径: {db_path}")
    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print("schema 已就绪")


async def sweep_overdue() -> int:
    """执行一次逾期扫描，扫描失败时返回非零退出码"""
    store_group = await create_store_group(get_db_path())
    activity_client = ActivityClient.from_config(load_activity_config())
    sweeper = OverdueSweeper.from_config(
        load_sweeper_config(), store_group.task_store, activity_client
    )
    try:
        result = await sweeper.run_once()
    finally:
        await activity_client.aclose()
        await store_group.conn.close()

    print(
        f"selected={result.selected} updated={result.updated} "
        f"notified={result.notified} failed_notifications={result.failed_notifications}"
    )
    return 1 if result.error else 0


if __name__ == "__main__":
    main()
