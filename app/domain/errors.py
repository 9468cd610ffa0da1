# app/domain/errors.py
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Categorías de error que la capa HTTP sabe traducir."""
    VALIDATION = "validation"  # Input del cliente inválido, no reintentar
    CONFIG = "config"  # Servidor sin credenciales / carpeta raíz
    QUEUE_FULL = "queue_full"  # Capacidad agotada, reintentar luego
    QUEUE_TIMEOUT = "queue_timeout"  # Esperó en la fila más de lo permitido
    REMOTE_ERROR = "remote_error"  # Falla opaca de Google Drive


class UploadServiceError(Exception):
    kind: ErrorKind = ErrorKind.REMOTE_ERROR
    default_message = "Error interno al enviar el documento a Drive."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidUploadError(UploadServiceError):
    kind = ErrorKind.VALIDATION
    default_message = "Campos filename y content son obligatorios."


class StorageNotConfiguredError(UploadServiceError):
    kind = ErrorKind.CONFIG
    default_message = "Variables GDRIVE_* no configuradas en el servidor."


class QueueFullError(UploadServiceError):
    kind = ErrorKind.QUEUE_FULL
    default_message = "Fila llena, intente nuevamente."


class QueueTimeoutError(UploadServiceError):
    kind = ErrorKind.QUEUE_TIMEOUT
    default_message = "Tiempo de espera en la fila agotado, intente nuevamente."


class RemoteStorageError(UploadServiceError):
    kind = ErrorKind.REMOTE_ERROR
