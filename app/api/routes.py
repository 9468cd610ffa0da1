# app/api/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.api.schemas import ErrorResponse, UploadDocumentRequest, UploadDocumentResponse
from app.config.settings import Settings
from app.domain.errors import ErrorKind, UploadServiceError
from app.domain.upload import UploadTask
from app.logger import get_logger
from app.services.upload_service import UploadService

logger = get_logger(__name__)

router = APIRouter(tags=["documents"])

UPLOAD_PATHS = ("/upload-document", "/minutag/upload-txt")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFIG: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.QUEUE_FULL: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.QUEUE_TIMEOUT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.REMOTE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}
RETRYABLE_KINDS = {ErrorKind.QUEUE_FULL, ErrorKind.QUEUE_TIMEOUT}


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upload_service(request: Request) -> UploadService:
    """Instancia única creada al arrancar (ver create_app)."""
    return request.app.state.upload_service


@router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    return "ok"


@router.post(
    UPLOAD_PATHS[0],
    response_model=UploadDocumentResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse},
               429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@router.post(UPLOAD_PATHS[1], response_model=UploadDocumentResponse, include_in_schema=False)
async def upload_document(
    payload: UploadDocumentRequest,
    service: UploadService = Depends(get_upload_service),
    settings: Settings = Depends(get_settings),
):
    """
    Recibe un TXT, garantiza la carpeta del profesor en Drive y sube el archivo.

    Todo lo que toca Drive corre bajo el límite de concurrencia; con la fila
    llena responde 429 con Retry-After.
    """
    task = UploadTask(filename=payload.filename, content=payload.content, owner=payload.owner)

    try:
        result = await service.execute(task)
    except UploadServiceError as e:
        status_code = STATUS_BY_KIND[e.kind]
        headers = None
        if e.kind in RETRYABLE_KINDS:
            headers = {"Retry-After": str(settings.retry_after_seconds)}
        elif e.kind == ErrorKind.REMOTE_ERROR:
            logger.error("Upload failed for filename=%s: %s", task.filename, e.message)
        return error_response(status_code, e.message, headers)
    except Exception as e:
        logger.error("Unexpected error uploading %s: %s", task.filename, e, exc_info=True)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Error interno al enviar el documento a Drive.",
        )

    return UploadDocumentResponse(
        file_id=result.file_id,
        file_name=result.file_name,
        owner=result.owner or None,
    )
