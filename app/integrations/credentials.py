# app/integrations/credentials.py
"""
Proveedores de credenciales para Google Drive.

Se elige una estrategia una sola vez al arrancar (refresh token OAuth2 o
Service Account) y el resto del servicio sólo ve `get_credentials()`.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Optional

from google.oauth2 import credentials as oauth2_credentials
from google.oauth2 import service_account

from app.config.settings import Settings
from app.logger import get_logger

logger = get_logger(__name__)

# drive.file alcanza para carpetas/archivos creados por la propia app
SCOPES = ["https://www.googleapis.com/auth/drive.file"]
SERVICE_ACCOUNT_SCOPES = ["https://www.googleapis.com/auth/drive"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class CredentialProvider(ABC):
    name: str = "base"

    @abstractmethod
    def get_credentials(self):
        """Devuelve un objeto google.auth.credentials.Credentials listo para `build()`."""


class RefreshTokenCredential(CredentialProvider):
    """OAuth2 de usuario reutilizando un refresh token de larga duración."""

    name = "oauth_refresh_token"

    def __init__(self, client_id: str, client_secret: str, refresh_token: str, scopes: Optional[list[str]] = None):
        if not (client_id and client_secret and refresh_token):
            raise ValueError("client_id, client_secret and refresh_token are required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.scopes = scopes or SCOPES

    def get_credentials(self):
        # Sin access token: google-auth lo refresca en la primera llamada
        return oauth2_credentials.Credentials(
            token=None,
            refresh_token=self.refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=self.scopes,
        )


class ServiceAccountCredential(CredentialProvider):
    """Service Account (JWT) desde archivo o desde el JSON en una variable de entorno."""

    name = "service_account"

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        credentials_info: Optional[dict] = None,
        scopes: Optional[list[str]] = None,
    ):
        if not credentials_path and not credentials_info:
            raise ValueError("credentials_path or credentials_info is required")
        self.credentials_path = credentials_path
        self.credentials_info = credentials_info
        self.scopes = scopes or SERVICE_ACCOUNT_SCOPES

    def get_credentials(self):
        if self.credentials_info:
            return service_account.Credentials.from_service_account_info(
                self.credentials_info, scopes=self.scopes
            )
        return service_account.Credentials.from_service_account_file(
            self.credentials_path, scopes=self.scopes
        )


def build_credential_provider(settings: Settings) -> Optional[CredentialProvider]:
    """
    Selecciona la estrategia de credenciales según la configuración.

    Returns:
        El proveedor elegido, o None si faltan variables (el servicio
        arranca igual pero cada upload responde con error de configuración).
    """
    mode = settings.gdrive_auth_mode
    use_service_account = mode == "service_account" or (mode == "auto" and settings.has_service_account)

    if use_service_account:
        if not settings.has_service_account:
            logger.warning("GDRIVE_AUTH_MODE=service_account but no service account credentials configured")
            return None
        info = json.loads(settings.gdrive_service_account_json) if settings.gdrive_service_account_json else None
        logger.info("Using Google service account credentials")
        return ServiceAccountCredential(
            credentials_path=settings.gdrive_service_account_file,
            credentials_info=info,
        )

    if settings.has_oauth_credentials:
        logger.info("Using Google OAuth2 refresh token credentials")
        return RefreshTokenCredential(
            client_id=settings.gdrive_client_id,
            client_secret=settings.gdrive_client_secret,
            refresh_token=settings.gdrive_refresh_token,
        )

    logger.warning("GDRIVE_* credentials not configured. Uploads to Drive will not work.")
    return None
