"""
Document Versioning.

Generated documents are stored as File rows named
"{reference} - {doc_type} - v{n}.{ext}". Only the newest `max_versions`
files of one document kind are kept per entity.
"""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import ExternalServiceError
from modules.backend.core.logging import get_logger
from modules.backend.documents.greeklish import create_safe_filename
from modules.backend.integrations.bunny import BunnyStorageClient
from modules.backend.repositories.file import FileRepository

logger = get_logger(__name__)

VERSION_PATTERN = re.compile(r" - v(\d+)(?:\.\w+)?$")


def version_of(filename: str) -> int:
    """Version number encoded in a document file name, 0 when absent."""
    match = VERSION_PATTERN.search(filename)
    return int(match.group(1)) if match else 0


def version_prefix(reference: str, document_type: str) -> str:
    """Name prefix shared by every version of one document."""
    return create_safe_filename(reference, document_type, extension="") + " - v"


class DocumentVersionManager:
    """
    Computes the next version of a document and prunes old versions.

    Usage:
        versions = DocumentVersionManager(session, bunny)
        version = await versions.prepare(lead.id, "LEAD", "LL001", "BOM")
        filename = create_safe_filename("LL001", "BOM", version, ".xlsx")
    """

    def __init__(
        self,
        session: AsyncSession,
        storage: BunnyStorageClient,
        max_versions: int = 10,
    ) -> None:
        self.repo = FileRepository(session)
        self.storage = storage
        self.max_versions = max_versions

    async def prepare(
        self,
        entity_id: str,
        entity_type: str,
        reference: str,
        document_type: str,
    ) -> int:
        """
        Make room for a new version and return its number.

        When `max_versions` files already exist, every file beyond the newest
        `max_versions - 1` is deleted from the CDN and the database. CDN
        failures are logged and do not stop the cleanup.
        """
        existing = await self.repo.list_by_name_prefix(
            entity_id, entity_type, version_prefix(reference, document_type),
        )
        existing.sort(key=lambda f: version_of(f.name), reverse=True)
        next_version = max((version_of(f.name) for f in existing), default=0) + 1

        if len(existing) >= self.max_versions:
            for old in existing[self.max_versions - 1:]:
                try:
                    await self.storage.delete(old.url)
                except ExternalServiceError as e:
                    logger.warning(
                        "Failed to delete old document version from CDN",
                        extra={"file_id": old.id, "file_name": old.name, "error": e.message},
                    )
                await self.repo.delete(old.id)
                logger.info(
                    "Removed old document version",
                    extra={"file_id": old.id, "file_name": old.name},
                )

        return next_version
