"""
Background Tasks Package.

Taskiq-based notification delivery with a Redis list-queue broker.

Usage (with Redis - background_tasks_enabled: true):
    from modules.backend.tasks import register_tasks

    tasks = register_tasks()
    await tasks["site_survey_assigned"].kiq(payload)

Usage (without Redis):
    from modules.backend.tasks.notifications import send_site_survey_assignment

    result = await send_site_survey_assignment(payload)

Worker:
    taskiq worker modules.backend.tasks.worker:broker
"""

from modules.backend.tasks.broker import get_broker
from modules.backend.tasks.notifications import (
    TASK_CONFIG,
    TASKS,
    dispatch_notification,
    register_tasks,
    send_lead_created,
    send_site_survey_assignment,
)

__all__ = [
    "get_broker",
    "register_tasks",
    "dispatch_notification",
    "TASK_CONFIG",
    "TASKS",
    "send_lead_created",
    "send_site_survey_assignment",
]
