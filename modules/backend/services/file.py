"""
File Service.

Uploads to the Bunny CDN with File metadata rows, cabling image
conversion, listing and deletion.
"""

import io
import re
import secrets
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import ApplicationError, ValidationError
from modules.backend.core.utils import timestamp_ms
from modules.backend.integrations.bunny import BunnyStorageClient
from modules.backend.models.file import File, FileEntityType
from modules.backend.repositories.file import FileRepository
from modules.backend.schemas.file import (
    CablingImageResponse,
    FileResponse,
    UploadError,
    UploadResult,
)
from modules.backend.services.base import BaseService

PDF_CONTENT_TYPE = "application/pdf"
WEBP_CONTENT_TYPE = "image/webp"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

ENTITY_BASE_PATHS = {
    FileEntityType.CUSTOMER.value: "customers",
    FileEntityType.SUPPLIER.value: "suppliers",
    FileEntityType.PROJECT.value: "projects",
    FileEntityType.TASK.value: "tasks",
    FileEntityType.USER.value: "users",
    FileEntityType.SITESURVEY.value: "sitesurveys",
    FileEntityType.LEAD.value: "leads",
    FileEntityType.BRAND.value: "brands",
}

_FOLDER_UNSAFE = re.compile(r"[^a-zA-Z0-9._-]")
_NAME_UNSAFE = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_folder(folder: str) -> str:
    """Folder names may be emails or tax ids: "a@b.gr" -> "a_at_b.gr"."""
    return _FOLDER_UNSAFE.sub("_", folder.replace("@", "_at_"))


def sanitize_file_name(name: str) -> str:
    return _NAME_UNSAFE.sub("_", name)


def upload_path(entity_type: str, folder: str, file_name: str, timestamp: int) -> str:
    """CDN path `{base}/{folder}/{timestamp}_{name}` for a generic upload."""
    base = ENTITY_BASE_PATHS[entity_type]
    return f"{base}/{sanitize_folder(folder)}/{timestamp}_{sanitize_file_name(file_name)}"


def convert_to_webp(data: bytes, max_dimension: int, quality: int) -> tuple[bytes, int, int]:
    """
    Fit an image inside max_dimension x max_dimension and encode it as WebP.

    Small images are not enlarged; transparency is kept.

    Returns:
        Tuple of (webp bytes, width, height)

    Raises:
        ValidationError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(data)) as source:
            image = ImageOps.exif_transpose(source)
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA" if "transparency" in image.info or "A" in image.mode else "RGB")
            image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            output = io.BytesIO()
            image.save(output, format="WEBP", quality=quality)
            return output.getvalue(), image.width, image.height
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("File is not a valid image") from exc


@dataclass
class UploadItem:
    """One uploaded file as received from the client."""

    name: str
    content_type: str | None
    data: bytes
    title: str | None = None


class FileService(BaseService):
    """Service for stored files."""

    def __init__(self, session: AsyncSession, storage: BunnyStorageClient | None = None) -> None:
        super().__init__(session)
        self.repo = FileRepository(session)
        self.storage = storage

    async def list_files(self, entity_id: str, entity_type: str | None = None) -> list[File]:
        return await self.repo.list_for_entity(entity_id, entity_type)

    async def upload_files(
        self,
        entity_id: str,
        entity_type: str,
        folder: str,
        items: list[UploadItem],
        description: str | None = None,
    ) -> UploadResult:
        """
        Upload files for an entity and record them.

        A file that fails to upload or to be recorded is reported in
        `errors`; the remaining files are still processed.

        Raises:
            ValidationError: Unknown entity type, no folder or no files
        """
        if entity_type not in ENTITY_BASE_PATHS:
            raise ValidationError("Invalid entity type", details={"entity_type": entity_type})
        self._validate_required(
            {"entity_id": entity_id, "folder": folder},
            ["entity_id", "folder"],
        )
        if not items:
            raise ValidationError("No files provided")

        self._log_operation(
            "Uploading files",
            entity_id=entity_id,
            entity_type=entity_type,
            count=len(items),
        )
        result = UploadResult()
        for item in items:
            content_type = item.content_type or DEFAULT_CONTENT_TYPE
            try:
                path = upload_path(entity_type, folder, item.name, timestamp_ms())
                url = await self.storage.put(path, item.data, content_type)
                record = await self._execute_db_operation(
                    "create_file",
                    self.repo.create(
                        entity_id=entity_id,
                        type=entity_type,
                        name=item.name,
                        title=item.title or None,
                        filetype=content_type,
                        url=url,
                        description=description or None,
                        size=len(item.data),
                    ),
                )
                result.files.append(FileResponse.model_validate(record))
            except ApplicationError as e:
                self._logger.warning(
                    "File upload failed",
                    extra={"file_name": item.name, "entity_id": entity_id, "error": e.message},
                )
                result.errors.append(UploadError(name=item.name, error=e.message))

        self._log_operation(
            "Files uploaded",
            entity_id=entity_id,
            uploaded=len(result.files),
            failed=len(result.errors),
        )
        return result

    async def upload_cabling_image(
        self,
        entity_type: str,
        entity_id: str,
        item: UploadItem,
    ) -> CablingImageResponse:
        """
        Store a photo or drawing of a cabling tree node.

        PDFs are stored unchanged. Images are checked against the allowed
        types and size limit, then converted to WebP.

        Raises:
            ValidationError: Unsupported type, too large, or unreadable image
        """
        self._validate_required(
            {"entity_type": entity_type, "entity_id": entity_id},
            ["entity_type", "entity_id"],
        )
        uploads = get_app_config().integrations.uploads
        folder = f"cabling/{sanitize_folder(entity_type)}/{sanitize_folder(entity_id)}"
        unique = f"{timestamp_ms()}-{secrets.token_hex(8)}"

        if item.content_type == PDF_CONTENT_TYPE:
            path = f"{folder}/{unique}.pdf"
            url = await self.storage.put(path, item.data, PDF_CONTENT_TYPE)
            return CablingImageResponse(
                url=url,
                filename=path,
                content_type=PDF_CONTENT_TYPE,
                size=len(item.data),
            )

        if item.content_type not in uploads.allowed_image_types:
            raise ValidationError(
                "Invalid file type. Only images and PDFs are allowed.",
                details={"content_type": item.content_type},
            )
        if len(item.data) > uploads.max_image_size_bytes:
            raise ValidationError(
                "File size too large",
                details={"max_bytes": uploads.max_image_size_bytes, "size": len(item.data)},
            )

        webp, width, height = await run_blocking(
            convert_to_webp,
            item.data,
            uploads.image_max_dimension,
            uploads.image_quality,
        )
        path = f"{folder}/{unique}.webp"
        url = await self.storage.put(path, webp, WEBP_CONTENT_TYPE)
        self._log_operation(
            "Cabling image stored",
            path=path,
            original_size=len(item.data),
            size=len(webp),
        )
        return CablingImageResponse(
            url=url,
            filename=path,
            content_type=WEBP_CONTENT_TYPE,
            size=len(webp),
            width=width,
            height=height,
        )

    async def delete_file(self, file_id: str) -> None:
        """Remove a file from the CDN and delete its record."""
        record = await self.repo.get_by_id(file_id)
        self._log_operation("Deleting file", file_id=file_id, url=record.url)
        await self.storage.delete(record.url)
        await self._execute_db_operation("delete_file", self.repo.delete(file_id))
