from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError

from app.api.middleware import UploadBodyLimitMiddleware
from app.api.routes import UPLOAD_PATHS, error_response, router as documents_router
from app.config.settings import Settings
from app.domain.storage import RemoteStorage
from app.integrations.credentials import build_credential_provider
from app.integrations.drive_client import DriveStorageClient
from app.logger import get_logger
from app.services.admission import AdmissionController
from app.services.upload_service import UploadService

logger = get_logger(__name__)


def build_storage(settings: Settings) -> Optional[RemoteStorage]:
    provider = build_credential_provider(settings)
    if provider is None:
        return None
    return DriveStorageClient(
        credential_provider=provider,
        overwrite_existing=settings.gdrive_overwrite_existing,
    )


def create_app(settings: Optional[Settings] = None, storage: Optional[RemoteStorage] = None) -> FastAPI:
    """
    Arma la aplicación. El controlador de admisión se crea una sola vez aquí
    y vive en app.state durante todo el proceso.

    Args:
        settings: Configuración; por defecto se lee del entorno.
        storage: Almacenamiento remoto ya construido (para testing/DI).
    """
    settings = settings or Settings()
    app = FastAPI(title=settings.app_name)

    if storage is None:
        storage = build_storage(settings)
    if not settings.gdrive_folder_id:
        logger.warning("GDRIVE_FOLDER_ID not configured. Uploads to Drive will not work.")

    admission = AdmissionController(
        max_active=settings.max_drive_concurrency,
        max_queue=settings.max_queue,
        wait_timeout=settings.queue_wait_timeout_seconds,
    )
    app.state.settings = settings
    app.state.admission = admission
    app.state.upload_service = UploadService(
        storage=storage,
        admission=admission,
        root_folder_id=settings.gdrive_folder_id,
    )

    # Límite de tamaño sólo en las rutas de upload
    app.add_middleware(UploadBodyLimitMiddleware, max_body_bytes=settings.max_body_bytes, paths=UPLOAD_PATHS)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Invalid request body on %s: %s", request.url.path, exc.errors())
        return error_response(status.HTTP_400_BAD_REQUEST, "Body JSON inválido o campos con tipo incorrecto.")

    app.include_router(documents_router)
    logger.info(
        "App ready: max_drive_concurrency=%d max_queue=%d configured=%s",
        settings.max_drive_concurrency, settings.max_queue, app.state.upload_service.is_configured,
    )
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
