"""Image upload API routes."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from bookstore.api.schemas import FileUploadResponse, MessageResponse
from bookstore.services.file_storage import FileStorageService, get_file_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/fileupload", tags=["uploads"])


@router.post("/upload", response_model=FileUploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    storage: FileStorageService = Depends(get_file_storage_service),
) -> FileUploadResponse:
    """Store an image and return its public URL."""
    data = await file.read()
    logger.info(f"Upload request received. File: {file.filename}, Size: {len(data)}")

    stored = storage.save_image(file.filename or "", file.content_type, data)

    return FileUploadResponse(
        url=stored.url,
        file_name=stored.file_name,
        original_name=stored.original_name,
        size=stored.size,
    )


@router.delete("/delete/{file_name}", response_model=MessageResponse)
async def delete_file(
    file_name: str,
    storage: FileStorageService = Depends(get_file_storage_service),
) -> MessageResponse:
    """Delete a previously uploaded image."""
    if not storage.delete_image(file_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        )
    return MessageResponse(message="File deleted successfully")
