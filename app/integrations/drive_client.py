# app/integrations/drive_client.py
import io
import threading
from typing import Optional

import google_auth_httplib2
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload, build_http

from app.integrations.credentials import CredentialProvider
from app.logger import get_logger

logger = get_logger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
TEXT_MIME_TYPE = "text/plain"


def escape_query_value(value: str) -> str:
    """Escapa un literal para el lenguaje de consultas de Drive (comillas simples)."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveStorageClient:
    """
    Carpetas y archivos de texto en Google Drive v3.

    Las llamadas son bloqueantes (googleapiclient); el orquestador las corre
    en hilos de trabajo, varios a la vez. httplib2 no es thread-safe, así que
    cada request se ejecuta con su propio Http autorizado.
    """

    def __init__(
        self,
        credential_provider: Optional[CredentialProvider] = None,
        service=None,
        overwrite_existing: bool = False,
    ) -> None:
        """
        Args:
            credential_provider: Estrategia de credenciales elegida al arrancar.
            service: Servicio de Drive ya inicializado (para testing/DI).
            overwrite_existing: Si es True, un archivo con el mismo nombre se actualiza.
        """
        if service is None and credential_provider is None:
            raise ValueError("credential_provider or service is required")
        self._credential_provider = credential_provider
        self._service = service
        self._credentials = None
        self._init_lock = threading.Lock()
        self.overwrite_existing = overwrite_existing

    @property
    def credentials(self):
        if self._credentials is None and self._credential_provider is not None:
            with self._init_lock:
                if self._credentials is None:
                    self._credentials = self._credential_provider.get_credentials()
        return self._credentials

    @property
    def service(self):
        if self._service is None:
            credentials = self.credentials
            with self._init_lock:
                if self._service is None:
                    logger.info("Initializing Google Drive service (%s)", self._credential_provider.name)
                    self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return self._service

    def new_http(self):
        """Http autorizado nuevo para una sola request; None si no hay credenciales (servicio inyectado)."""
        if self.credentials is None:
            return None
        return google_auth_httplib2.AuthorizedHttp(self.credentials, http=build_http())

    def _execute(self, request) -> dict:
        return request.execute(http=self.new_http())

    def find_folders(self, name: str, parent_id: str) -> list[str]:
        query = " and ".join([
            f"mimeType = '{FOLDER_MIME_TYPE}'",
            "trashed = false",
            f"name = '{escape_query_value(name)}'",
            f"'{escape_query_value(parent_id)}' in parents",
        ])
        response = self._execute(self.service.files().list(
            q=query,
            fields="files(id,name)",
            spaces="drive",
        ))
        # Coincidencia exacta (sensible a mayúsculas) también del lado del cliente
        return [f["id"] for f in response.get("files", []) if f.get("name") == name]

    def create_folder(self, name: str, parent_id: str) -> str:
        """Crea una carpeta en Drive."""
        metadata = {
            "name": name,
            "mimeType": FOLDER_MIME_TYPE,
            "parents": [parent_id],
        }
        folder = self._execute(self.service.files().create(body=metadata, fields="id,name"))
        folder_id = folder.get("id")
        logger.info("Folder created in Drive: '%s' -> %s", name, folder_id)
        return folder_id

    def create_or_update_file(self, name: str, parent_id: str, content: str) -> dict:
        """Sube `content` como text/plain; actualiza en sitio si overwrite_existing y ya existe."""
        media = MediaIoBaseUpload(
            io.BytesIO(content.encode("utf-8")),
            mimetype=TEXT_MIME_TYPE,
            resumable=False,
        )

        existing_id = self._find_file(name, parent_id) if self.overwrite_existing else None
        if existing_id:
            logger.info("Updating existing Drive file '%s' (%s)", name, existing_id)
            return self._execute(self.service.files().update(
                fileId=existing_id,
                media_body=media,
                fields="id,name,parents",
            ))

        logger.info("Uploading file to Drive: '%s'", name)
        return self._execute(self.service.files().create(
            body={"name": name, "parents": [parent_id]},
            media_body=media,
            fields="id,name,parents",
        ))

    def _find_file(self, name: str, parent_id: str) -> Optional[str]:
        query = " and ".join([
            f"mimeType != '{FOLDER_MIME_TYPE}'",
            "trashed = false",
            f"name = '{escape_query_value(name)}'",
            f"'{escape_query_value(parent_id)}' in parents",
        ])
        response = self._execute(self.service.files().list(
            q=query,
            fields="files(id,name)",
            spaces="drive",
        ))
        for f in response.get("files", []):
            if f.get("name") == name:
                return f["id"]
        return None
