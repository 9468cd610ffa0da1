# app/api/schemas.py
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UploadDocumentRequest(BaseModel):
    # filename/content opcionales a nivel de schema: la validación de
    # obligatoriedad vive en UploadTask y responde 400
    filename: Optional[str] = Field(None, description="Nombre del archivo en Drive (ej: 'anotacoes.txt').")
    content: Optional[str] = Field(None, description="Contenido de texto a subir.")
    owner: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("owner", "professor"),
        description="Profesor dueño de la carpeta destino. Acepta también 'professor'.",
    )


class UploadDocumentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    file_id: str = Field(..., alias="fileId")
    file_name: str = Field(..., alias="fileName")
    owner: Optional[str] = None


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
