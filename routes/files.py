"""
File API routes.

Upload a single file and list the files currently stored.
Errors use the standard {"error": {...}} response format.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
import structlog

from models.file import FileListResponse, UploadResult
from services.file_service import FileService, get_file_service
from exceptions import AppError, NoFileUploadedError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Files"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {"reason": str(e)}
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/upload", response_model=UploadResult)
async def upload_file(
    file: Optional[UploadFile] = File(None, description="File to store for 24 hours"),
    service: FileService = Depends(get_file_service)
):
    """
    Upload one file.

    The file is public at the returned URL until it expires.

    Raises:
        400: No file in the request
        500: Content store failure
        503: Content store not configured
    """
    try:
        if file is None or not file.filename:
            raise NoFileUploadedError()

        content = await file.read()
        return await service.upload(file.filename, content)

    except Exception as e:
        return handle_error(e)


@router.get("/files", response_model=FileListResponse)
async def list_files(service: FileService = Depends(get_file_service)):
    """
    List stored files with their expiry.

    Files whose stored names do not follow the timestamp convention
    are omitted.
    """
    try:
        files = await service.list_files()
        return FileListResponse(files=files)

    except Exception as e:
        return handle_error(e)
