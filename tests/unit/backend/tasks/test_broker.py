"""Unit tests for the taskiq broker factory. No Redis connection is opened."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from taskiq import TaskiqEvents
from taskiq.middlewares import SimpleRetryMiddleware
from taskiq_redis import ListQueueBroker

from modules.backend.tasks import broker as broker_module


@pytest.fixture
def broker_config():
    config = SimpleNamespace(
        database=SimpleNamespace(
            redis=SimpleNamespace(
                broker=SimpleNamespace(queue_name="survey_crm_tasks", result_expiry_seconds=600)
            )
        )
    )
    with (
        patch.object(broker_module, "get_app_config", return_value=config),
        patch.object(broker_module, "get_redis_url", return_value="redis://:secret@localhost:6379/0"),
    ):
        yield config


@pytest.fixture(autouse=True)
def _reset_broker():
    broker_module._broker = None
    yield
    broker_module._broker = None


def test_create_broker(broker_config):
    broker = broker_module.create_broker()

    assert isinstance(broker, ListQueueBroker)
    assert broker.queue_name == "survey_crm_tasks"
    assert any(isinstance(m, SimpleRetryMiddleware) for m in broker.middlewares)
    assert broker.event_handlers[TaskiqEvents.WORKER_SHUTDOWN]


def test_get_broker_is_cached(broker_config):
    assert broker_module.get_broker() is broker_module.get_broker()


async def test_worker_shutdown_releases_pools():
    with patch("modules.backend.core.concurrency.shutdown_pools", AsyncMock()) as shutdown:
        await broker_module._on_worker_shutdown(SimpleNamespace())

    shutdown.assert_awaited_once()
