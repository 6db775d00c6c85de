"""
Taskiq Broker.

Notifications are queued on a Redis list (taskiq-redis ListQueueBroker)
named by database.yaml `redis.broker.queue_name`; results expire after
`result_expiry_seconds`. Tasks that raise are retried by
SimpleRetryMiddleware according to their `retry_on_error` and
`max_retries` labels.

The broker is only built when features.yaml enables background tasks:
the API builds it in its lifespan, the worker on import of
modules.backend.tasks.worker.
"""

from taskiq import TaskiqEvents, TaskiqState
from taskiq.middlewares import SimpleRetryMiddleware
from taskiq_redis import ListQueueBroker, RedisAsyncResultBackend

from modules.backend.core.config import get_app_config, get_redis_url
from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RETRY_COUNT = 3

_broker: ListQueueBroker | None = None


def create_broker() -> ListQueueBroker:
    broker_config = get_app_config().database.redis.broker
    redis_url = get_redis_url()

    broker = (
        ListQueueBroker(url=redis_url, queue_name=broker_config.queue_name)
        .with_result_backend(
            RedisAsyncResultBackend(redis_url=redis_url, result_ex_time=broker_config.result_expiry_seconds)
        )
        .with_middlewares(SimpleRetryMiddleware(default_retry_count=DEFAULT_RETRY_COUNT))
    )
    broker.add_event_handler(TaskiqEvents.WORKER_STARTUP, _on_worker_startup)
    broker.add_event_handler(TaskiqEvents.WORKER_SHUTDOWN, _on_worker_shutdown)

    logger.debug(
        "Taskiq broker configured",
        extra={
            "queue_name": broker_config.queue_name,
            "result_expiry": broker_config.result_expiry_seconds,
        },
    )
    return broker


async def _on_worker_startup(state: TaskiqState) -> None:
    logger.info("Notification worker starting")


async def _on_worker_shutdown(state: TaskiqState) -> None:
    from modules.backend.core.concurrency import shutdown_pools

    await shutdown_pools()
    logger.info("Notification worker stopped")


def get_broker() -> ListQueueBroker:
    """Process-wide broker, created on first call."""
    global _broker
    if _broker is None:
        _broker = create_broker()
    return _broker
