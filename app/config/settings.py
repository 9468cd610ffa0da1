# app/config/settings.py
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Mismos nombres de variables que usa el despliegue en Render
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="minutag-upload-service",
        description="Service name for FastAPI.",
    )
    port: int = Field(default=3000, description="Puerto de escucha de uvicorn.")

    # Google Drive: credenciales
    gdrive_auth_mode: Literal["auto", "oauth", "service_account"] = Field(
        default="auto",
        description="Estrategia de credenciales. 'auto' prefiere service account si está configurada.",
    )
    gdrive_client_id: Optional[str] = Field(default=None, description="OAuth2 client id.")
    gdrive_client_secret: Optional[str] = Field(default=None, description="OAuth2 client secret.")
    gdrive_refresh_token: Optional[str] = Field(
        default=None,
        description="Refresh token obtenido con el flujo de consentimiento offline.",
    )
    gdrive_service_account_file: Optional[str] = Field(
        default=None,
        description="Ruta al JSON de la Service Account.",
    )
    gdrive_service_account_json: Optional[str] = Field(
        default=None,
        description="Contenido JSON de la Service Account (alternativa al archivo).",
    )

    # Google Drive: destino
    gdrive_folder_id: Optional[str] = Field(
        default=None,
        description="Carpeta raíz donde viven las carpetas de los profesores.",
    )
    gdrive_overwrite_existing: bool = Field(
        default=False,
        description="Si es True, actualiza un archivo con el mismo nombre en vez de crear otro.",
    )

    # Control de admisión hacia Drive
    max_drive_concurrency: int = Field(default=5, ge=1, description="Slots activos simultáneos.")
    max_queue: int = Field(default=50, ge=0, description="Máximo de solicitudes en espera.")
    retry_after_seconds: int = Field(default=3, ge=0, description="Valor del header Retry-After.")
    queue_wait_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Tiempo máximo en la fila antes de rendirse (None = sin límite).",
    )

    max_body_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Tamaño máximo del body JSON en las rutas de upload.",
    )

    @property
    def has_oauth_credentials(self) -> bool:
        return bool(self.gdrive_client_id and self.gdrive_client_secret and self.gdrive_refresh_token)

    @property
    def has_service_account(self) -> bool:
        return bool(self.gdrive_service_account_file or self.gdrive_service_account_json)
