"""Unit tests for modules.backend.core.concurrency."""

import contextvars
import threading
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import structlog

import modules.backend.core.concurrency as concurrency
from modules.backend.core.concurrency import (
    TracedThreadPoolExecutor,
    get_io_pool,
    get_semaphore,
    run_blocking,
    shutdown_pools,
)


@pytest.fixture(autouse=True)
def _reset_pools():
    concurrency._io_pool = None
    concurrency._semaphores.clear()
    concurrency._semaphore_capacities.clear()
    yield
    if concurrency._io_pool is not None:
        concurrency._io_pool.shutdown(wait=False)
        concurrency._io_pool = None
    concurrency._semaphores.clear()
    concurrency._semaphore_capacities.clear()


@pytest.fixture
def app_config():
    config = SimpleNamespace(
        concurrency=SimpleNamespace(
            thread_pool=SimpleNamespace(max_workers=3),
            semaphores=SimpleNamespace(database=20, redis=20, external_api=4),
        )
    )
    with patch("modules.backend.core.config.get_app_config", return_value=config):
        yield config


class TestTracedThreadPoolExecutor:
    def test_carries_request_context(self):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="req-42", frontend="web")

        executor = TracedThreadPoolExecutor(max_workers=1)
        try:
            context = executor.submit(structlog.contextvars.get_contextvars).result(timeout=5)
        finally:
            executor.shutdown(wait=True)
            structlog.contextvars.clear_contextvars()

        assert context["request_id"] == "req-42"
        assert context["frontend"] == "web"

    def test_worker_changes_do_not_leak_back(self):
        marker = contextvars.ContextVar("marker", default="caller")

        def overwrite():
            marker.set("worker")
            return marker.get()

        executor = TracedThreadPoolExecutor(max_workers=1)
        try:
            assert executor.submit(overwrite).result(timeout=5) == "worker"
        finally:
            executor.shutdown(wait=True)

        assert marker.get() == "caller"


class TestIoPool:
    def test_created_once_from_config(self, app_config):
        pool = get_io_pool()

        assert get_io_pool() is pool
        assert pool._max_workers == 3

    async def test_run_blocking_uses_a_worker_thread(self, app_config):
        def render(rows, *, sheet):
            return sheet, len(rows), threading.current_thread() is threading.main_thread()

        sheet, count, on_main = await run_blocking(render, [1, 2, 3], sheet="Cabling")

        assert (sheet, count) == ("Cabling", 3)
        assert on_main is False

    async def test_run_blocking_propagates_errors(self, app_config):
        def broken():
            raise OSError("cannot identify image file")

        with pytest.raises(OSError, match="cannot identify"):
            await run_blocking(broken)


class TestGetSemaphore:
    def test_configured_capacity(self, app_config):
        semaphore = get_semaphore("external_api")

        assert semaphore._value == 4
        assert concurrency._semaphore_capacities["external_api"] == 4
        assert get_semaphore("external_api") is semaphore

    def test_unconfigured_name_defaults_to_20(self, app_config):
        assert get_semaphore("bunny_storage")._value == 20


class TestShutdownPools:
    async def test_releases_everything(self, app_config):
        get_io_pool()
        get_semaphore("database")

        await shutdown_pools()

        assert concurrency._io_pool is None
        assert concurrency._semaphores == {}
        assert concurrency._semaphore_capacities == {}

    async def test_without_pool(self):
        await shutdown_pools()

        assert concurrency._io_pool is None
