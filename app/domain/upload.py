# app/domain/upload.py
from dataclasses import dataclass
from typing import Optional

from app.domain.errors import InvalidUploadError

# Carpeta usada cuando la solicitud no trae profesor
UNNAMED_OWNER_FOLDER = "SEM_NOME"


def owner_folder_name(owner: Optional[str]) -> str:
    """Nombre de la carpeta destino: el owner sin espacios extremos, o el sentinel."""
    name = (owner or "").strip()
    return name or UNNAMED_OWNER_FOLDER


@dataclass(frozen=True)
class UploadTask:
    filename: Optional[str]
    content: Optional[str]
    owner: Optional[str] = None

    def validate(self) -> None:
        if not self.filename or not self.content:
            raise InvalidUploadError()

    @property
    def folder_name(self) -> str:
        return owner_folder_name(self.owner)


@dataclass(frozen=True)
class UploadResult:
    file_id: str
    file_name: str
    folder_id: str
    owner: Optional[str] = None
