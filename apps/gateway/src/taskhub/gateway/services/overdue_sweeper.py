"""OverdueSweeper -- 逾期任务定时扫描

每次运行：
1. 查询 due_date 落在 [now - window, now) 的 Pending 任务（只处理"刚刚"过期的任务）
2. 单条 UPDATE 批量推进到 OVERDUE（仅当仍为 Pending）
3. 对每个被推进的任务并发发送 TASK_UPDATED 通知，单个失败不影响其他
4. 整次运行包在失败边界内：任何异常都记录并吞掉，调度器下一个 tick 照常运行

调度：tick 对齐 interval 边界（默认整点，等价于 "0 * * * *"），
单飞锁保证同一进程内不会重叠运行。多实例互斥不在本层处理。
"""

import asyncio
import contextlib
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from pydantic import BaseModel, Field
from taskhub.activity import ActivityNotifier
from taskhub.core.config import SYSTEM_ACTOR, get_bool_env
from taskhub.core.models import (
    ActivityType,
    Task,
    TaskStatus,
    build_activity_event,
    can_mark_overdue,
    utc_now,
)
from taskhub.core.store import TaskStore

log = structlog.get_logger()


class SweeperConfig(BaseModel):
    """逾期扫描配置

    环境变量:
        TASKHUB_SWEEP_ENABLED: 是否启动进程内调度（默认 true）
        TASKHUB_SWEEP_INTERVAL_S: 扫描间隔（秒，默认 3600）
        TASKHUB_SWEEP_WINDOW_S: 回看窗口（秒，默认 60）
    """

    enabled: bool = Field(default=True, description="是否启动进程内调度")
    interval_s: int = Field(default=3600, ge=1, description="扫描间隔（秒）")
    window_s: int = Field(default=60, ge=1, description="回看窗口（秒）")


def load_sweeper_config() -> SweeperConfig:
    """从环境变量加载逾期扫描配置，非法数值回退默认值"""
    kwargs: dict = {"enabled": get_bool_env("TASKHUB_SWEEP_ENABLED", True)}
    for env_var, field in (
        ("TASKHUB_SWEEP_INTERVAL_S", "interval_s"),
        ("TASKHUB_SWEEP_WINDOW_S", "window_s"),
    ):
        val = os.environ.get(env_var)
        if not val:
            continue
        try:
            kwargs[field] = int(val)
        except ValueError:
            log.warning(
                "invalid_sweeper_config",
                env_var=env_var,
                value=val,
                fallback=SweeperConfig.model_fields[field].default,
            )
    return SweeperConfig(**kwargs)


@dataclass(slots=True)
class SweepResult:
    """单次扫描结果"""

    started_at: datetime
    selected: int = 0
    updated: int = 0
    notified: int = 0
    failed_notifications: int = 0
    skipped: bool = False
    error: str | None = None


def seconds_until_next_tick(now: datetime, interval_s: int) -> float:
    """距离下一个 interval 对齐边界的秒数（整点调度时即距下一个整点）"""
    remainder = now.timestamp() % interval_s
    return interval_s - remainder


class OverdueSweeper:
    """逾期扫描器 + 进程内调度"""

    def __init__(
        self,
        task_store: TaskStore,
        activity_client: ActivityNotifier,
        window: timedelta = timedelta(seconds=60),
        interval_s: int = 3600,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._activity = activity_client
        self._window = window
        self._interval_s = interval_s
        self._clock = clock
        self._run_lock = asyncio.Lock()
        self._scheduler: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self.last_result: SweepResult | None = None

    @classmethod
    def from_config(
        cls,
        config: SweeperConfig,
        task_store: TaskStore,
        activity_client: ActivityNotifier,
    ) -> "OverdueSweeper":
        return cls(
            task_store,
            activity_client,
            window=timedelta(seconds=config.window_s),
            interval_s=config.interval_s,
        )

    @property
    def running(self) -> bool:
        return self._scheduler is not None and not self._scheduler.done()

    async def run_once(self, now: datetime | None = None) -> SweepResult:
        """执行一次扫描；已有运行在进行时直接跳过

        永不抛出异常（取消除外）。
        """
        started_at = now or self._clock()
        if self._run_lock.locked():
            log.warning("overdue_sweep_skipped", reason="previous_run_active")
            return SweepResult(started_at=started_at, skipped=True)

        async with self._run_lock:
            result = await self._sweep(started_at)
            self.last_result = result
            return result

    async def _sweep(self, now: datetime) -> SweepResult:
        result = SweepResult(started_at=now)
        try:
            candidates = [
                task
                for task in await self._task_store.find_overdue_candidates(now, self._window)
                if can_mark_overdue(task.status)
            ]
            result.selected = len(candidates)
            if not candidates:
                return result

            updated_ids = set(
                await self._task_store.update_tasks_status(
                    [task.task_id for task in candidates],
                    TaskStatus.OVERDUE,
                    expected_status=TaskStatus.PENDING,
                )
            )
            swept = [task for task in candidates if task.task_id in updated_ids]
            result.updated = len(swept)
            for task in swept:
                task.status = TaskStatus.OVERDUE

            # 并发发送通知，单个失败不取消其他
            outcomes = await asyncio.gather(
                *(self._notify(task) for task in swept),
                return_exceptions=True,
            )
            for task, outcome in zip(swept, outcomes, strict=True):
                if isinstance(outcome, BaseException):
                    result.failed_notifications += 1
                    log.error(
                        "overdue_notification_failed",
                        task_id=task.task_id,
                        error_type=type(outcome).__name__,
                    )
                else:
                    result.notified += 1

            log.info(
                "overdue_sweep_completed",
                selected=result.selected,
                updated=result.updated,
                notified=result.notified,
                failed_notifications=result.failed_notifications,
                swept_at=now.isoformat(),
            )
            for task in swept:
                log.debug(
                    "task_marked_overdue",
                    task_id=task.task_id,
                    title=task.title,
                    due_date=task.due_date.isoformat(),
                )
        except Exception as e:
            result.error = type(e).__name__
            log.exception("overdue_sweep_failed", error_type=type(e).__name__)
        return result

    async def _notify(self, task: Task) -> None:
        event = build_activity_event(task, ActivityType.TASK_UPDATED, SYSTEM_ACTOR)
        await self._activity.log_activity(event)

    def start(self) -> None:
        """启动后台调度（重复调用无副作用）"""
        if self.running:
            return
        self._scheduler = asyncio.create_task(self._run_forever(), name="overdue-sweeper")
        log.info(
            "overdue_sweeper_started",
            interval_s=self._interval_s,
            window_s=int(self._window.total_seconds()),
        )
        if self._window.total_seconds() < self._interval_s:
            # 窗口小于间隔时，两次扫描之间过期的大部分任务不会被捕获
            log.warning(
                "overdue_sweep_window_gap",
                interval_s=self._interval_s,
                window_s=int(self._window.total_seconds()),
            )

    async def stop(self) -> None:
        """停止调度并取消进行中的扫描"""
        tasks = list(self._inflight)
        if self._scheduler is not None:
            tasks.append(self._scheduler)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._scheduler = None
        self._inflight.clear()
        log.info("overdue_sweeper_stopped")

    async def _run_forever(self) -> None:
        while True:
            await asyncio.sleep(seconds_until_next_tick(self._clock(), self._interval_s))
            # 每个 tick 独立运行，挂起的扫描不会拖住调度节奏
            run = asyncio.create_task(self.run_once())
            self._inflight.add(run)
            run.add_done_callback(self._inflight.discard)
