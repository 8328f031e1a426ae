"""Core 异常体系"""


class TaskHubError(Exception):
    """Core 包基础异常"""


class TaskNotFoundError(TaskHubError):
    """任务 ID 无法解析到已存在的任务"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class InvalidStatusTransitionError(TaskHubError):
    """状态流转不在允许的路径上"""

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Cannot transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status
