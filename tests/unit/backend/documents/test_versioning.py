"""
Unit Tests for document versioning.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.backend.core.exceptions import ExternalServiceError
from modules.backend.documents.versioning import (
    DocumentVersionManager,
    version_of,
    version_prefix,
)


def _file(version: int) -> SimpleNamespace:
    return SimpleNamespace(
        id=f"file-{version}",
        name=f"LL001 - BOM - v{version}.xlsx",
        url=f"https://cdn.test/leads/lead-1/bom/v{version}.xlsx",
    )


@pytest.fixture
def storage() -> AsyncMock:
    return AsyncMock()


def _manager(storage: AsyncMock, existing: list, max_versions: int = 3) -> DocumentVersionManager:
    manager = DocumentVersionManager(MagicMock(), storage, max_versions=max_versions)
    manager.repo = MagicMock()
    manager.repo.list_by_name_prefix = AsyncMock(return_value=existing)
    manager.repo.delete = AsyncMock()
    return manager


class TestVersionNames:
    """Tests for version parsing helpers."""

    @pytest.mark.parametrize(
        ("name", "version"),
        [
            ("LL001 - BOM - v1.xlsx", 1),
            ("LL001 - BOM - v12.xlsx", 12),
            ("LL001 - BOM - v7", 7),
            ("LL001 - BOM.xlsx", 0),
            ("notes v3.txt", 0),
        ],
    )
    def test_version_of(self, name, version):
        assert version_of(name) == version

    def test_prefix_uses_safe_reference(self):
        assert version_prefix("ΠΕΛΑΤΗΣ", "BOM") == "PELATIS - BOM - v"


class TestPrepare:
    """Tests for DocumentVersionManager.prepare."""

    async def test_first_version(self, storage):
        manager = _manager(storage, [])

        assert await manager.prepare("lead-1", "LEAD", "LL001", "BOM") == 1
        manager.repo.list_by_name_prefix.assert_awaited_once_with("lead-1", "LEAD", "LL001 - BOM - v")
        storage.delete.assert_not_awaited()

    async def test_next_version_follows_highest(self, storage):
        manager = _manager(storage, [_file(2), _file(5)])

        assert await manager.prepare("lead-1", "LEAD", "LL001", "BOM") == 6
        manager.repo.delete.assert_not_awaited()

    async def test_oldest_removed_at_limit(self, storage):
        manager = _manager(storage, [_file(1), _file(3), _file(2)], max_versions=3)

        assert await manager.prepare("lead-1", "LEAD", "LL001", "BOM") == 4

        storage.delete.assert_awaited_once_with("https://cdn.test/leads/lead-1/bom/v1.xlsx")
        manager.repo.delete.assert_awaited_once_with("file-1")

    async def test_cdn_failure_does_not_stop_cleanup(self, storage):
        storage.delete.side_effect = ExternalServiceError("Bunny down", service="bunny")
        manager = _manager(storage, [_file(v) for v in range(1, 5)], max_versions=3)

        assert await manager.prepare("lead-1", "LEAD", "LL001", "BOM") == 5

        deleted = [call.args[0] for call in manager.repo.delete.await_args_list]
        assert deleted == ["file-2", "file-1"]
