"""Activity 包测试 fixtures"""

from datetime import UTC, datetime

import pytest
from taskhub.core.models import ActivityEvent, ActivityType


@pytest.fixture
def sample_event() -> ActivityEvent:
    """标准 TASK_CREATED 事件"""
    return ActivityEvent(
        activity_type=ActivityType.TASK_CREATED,
        description="Task created by alice",
        performed_by="alice",
        metadata={
            "taskTitle": "Call Acme",
            "taskType": "Call",
            "dueDate": datetime(2024, 6, 10, 9, 0, tzinfo=UTC).isoformat(),
            "leadId": "lead-1",
        },
        task_id="01J00000000000000000000001",
        lead_id="lead-1",
    )
