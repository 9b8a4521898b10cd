"""File upload and download routes."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse

from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.services import get_file_storage
from backend.app.models.user import User
from backend.app.schemas.file import FileUploadResponse
from backend.app.services.file_storage import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("/upload", response_model=FileUploadResponse)
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File cannot be empty")
    try:
        file_url = storage.store_upload(file.filename, content, current_user.id)
    except OSError as exc:
        logger.exception("Error uploading file %s", file.filename)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error uploading file: {exc}")
    file_id = file_url.rsplit("/", 1)[-1]
    return FileUploadResponse(
        file_id=file_id,
        file_name=file.filename or file_id,
        file_download_uri=str(request.url_for("download_file", file_id=file_id)),
        file_type=file.content_type or "application/octet-stream",
        size=len(content),
    )


@router.get("/download/{file_id}", name="download_file")
def download_file(file_id: str, storage: FileStorage = Depends(get_file_storage)):
    metadata = storage.get_metadata(file_id)
    if metadata is None:
        logger.warning("File not found for ID: %s", file_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    logger.info("Serving file: %s (type: %s)", metadata.filename, metadata.content_type)
    return FileResponse(metadata.file_path, media_type=metadata.content_type, filename=metadata.filename)
