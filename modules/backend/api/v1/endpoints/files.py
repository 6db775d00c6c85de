"""
Files API Endpoints.

Uploads to the CDN and the File records that point at them.
"""

from fastapi import APIRouter, Form, Query, UploadFile
from fastapi import File as FileParam

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser, Storage
from modules.backend.models.file import FileEntityType
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.file import CablingImageResponse, FileResponse, UploadResult
from modules.backend.services.file import FileService, UploadItem

router = APIRouter()


async def _read_upload(upload: UploadFile, title: str | None = None) -> UploadItem:
    return UploadItem(
        name=upload.filename or "file",
        content_type=upload.content_type,
        data=await upload.read(),
        title=title,
    )


@router.get("", response_model=ApiResponse[list[FileResponse]], summary="List files of an entity")
async def list_files(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    entity_id: str = Query(..., min_length=1),
    type: FileEntityType | None = Query(default=None, description="Owning entity type"),
) -> ApiResponse[list[FileResponse]]:
    service = FileService(db)
    files = await service.list_files(entity_id, type.value if type else None)
    return ApiResponse(data=[FileResponse.model_validate(file) for file in files])


@router.post(
    "/upload",
    response_model=ApiResponse[UploadResult],
    status_code=201,
    summary="Upload files",
    description=(
        "Multipart upload of one or more files for an entity. Files that "
        "fail are listed under `errors`; the others are stored."
    ),
)
async def upload_files(
    db: DbSession,
    storage: Storage,
    request_id: RequestId,
    user: CurrentUser,
    files: list[UploadFile] = FileParam(...),
    entity_id: str = Form(...),
    entity_type: str = Form(...),
    folder: str = Form(...),
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
) -> ApiResponse[UploadResult]:
    service = FileService(db, storage)
    items = [await _read_upload(upload, title) for upload in files]
    result = await service.upload_files(entity_id, entity_type, folder, items, description)
    return ApiResponse(data=result)


@router.post(
    "/cabling-image",
    response_model=ApiResponse[CablingImageResponse],
    status_code=201,
    summary="Upload a cabling image",
    description="Images are resized and stored as WebP; PDFs are stored unchanged.",
)
async def upload_cabling_image(
    storage: Storage,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
    file: UploadFile = FileParam(...),
    entity_type: str = Form(..., alias="entityType"),
    entity_id: str = Form(..., alias="entityId"),
) -> ApiResponse[CablingImageResponse]:
    service = FileService(db, storage)
    item = await _read_upload(file)
    return ApiResponse(data=await service.upload_cabling_image(entity_type, entity_id, item))


@router.delete(
    "/{file_id}",
    status_code=204,
    summary="Delete a file",
    description="Removes the object from the CDN and its record.",
)
async def delete_file(
    file_id: str,
    db: DbSession,
    storage: Storage,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = FileService(db, storage)
    await service.delete_file(file_id)
