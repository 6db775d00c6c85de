"""
Taskiq worker entry point.

Creates the broker and registers the notification tasks on it.

Usage:
    taskiq worker modules.backend.tasks.worker:broker
"""

from modules.backend.core.logging import bind_source, setup_logging
from modules.backend.tasks.broker import get_broker
from modules.backend.tasks.notifications import register_tasks

setup_logging()
bind_source("tasks")

broker = get_broker()
tasks = register_tasks()
