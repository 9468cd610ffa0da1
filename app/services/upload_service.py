# app/services/upload_service.py
from __future__ import annotations

import asyncio
import weakref
from typing import Optional

from app.domain.errors import RemoteStorageError, StorageNotConfiguredError, UploadServiceError
from app.domain.storage import RemoteStorage
from app.domain.upload import UploadResult, UploadTask
from app.logger import get_logger
from app.services.admission import AdmissionController

logger = get_logger(__name__)


class UploadService:
    """
    Coordina la subida de un documento: valida, pide un slot de Drive,
    resuelve la carpeta del profesor y sube el archivo.

    La resolución de carpeta se serializa por nombre dentro del proceso,
    así dos primeros uploads simultáneos del mismo profesor crean una sola
    carpeta. Entre procesos distintos la carrera sigue existiendo.
    """

    def __init__(
        self,
        storage: Optional[RemoteStorage],
        admission: AdmissionController,
        root_folder_id: Optional[str],
        serialize_owner_folders: bool = True,
    ) -> None:
        self.storage = storage
        self.admission = admission
        self.root_folder_id = root_folder_id
        self.serialize_owner_folders = serialize_owner_folders
        self._folder_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @property
    def is_configured(self) -> bool:
        return self.storage is not None and bool(self.root_folder_id)

    async def execute(self, task: UploadTask) -> UploadResult:
        """
        Sube el documento a la carpeta del owner.

        Raises:
            InvalidUploadError: filename o content vacíos (antes de pedir slot).
            StorageNotConfiguredError: faltan credenciales o carpeta raíz.
            QueueFullError / QueueTimeoutError: sin capacidad en este momento.
            RemoteStorageError: cualquier falla de Drive.
        """
        task.validate()
        if not self.is_configured:
            raise StorageNotConfiguredError()

        logger.info(
            "Received upload filename=%s owner=%s length=%d",
            task.filename, task.owner or "(sin profesor)", len(task.content),
        )

        async with self.admission.slot():
            folder_id = await self.resolve_owner_folder(task.folder_name)
            uploaded = await self._call_storage(
                self.storage.create_or_update_file, task.filename, folder_id, task.content
            )

        logger.info("Upload completed: id=%s name=%s folder=%s", uploaded.get("id"), uploaded.get("name"), folder_id)
        return UploadResult(
            file_id=uploaded["id"],
            file_name=uploaded.get("name") or task.filename,
            folder_id=folder_id,
            owner=task.owner,
        )

    async def resolve_owner_folder(self, folder_name: str) -> str:
        """Busca la carpeta exacta bajo la raíz; si no existe la crea. Si hay varias, usa la primera."""
        if not self.serialize_owner_folders:
            return await self._find_or_create_folder(folder_name)

        lock = self._folder_locks.get(folder_name)
        if lock is None:
            lock = asyncio.Lock()
            self._folder_locks[folder_name] = lock
        async with lock:
            return await self._find_or_create_folder(folder_name)

    async def _find_or_create_folder(self, folder_name: str) -> str:
        folder_ids = await self._call_storage(self.storage.find_folders, folder_name, self.root_folder_id)
        if folder_ids:
            if len(folder_ids) > 1:
                logger.warning("Multiple folders named '%s' under root: %d. Taking first.", folder_name, len(folder_ids))
            logger.info("Owner folder found: %s -> %s", folder_name, folder_ids[0])
            return folder_ids[0]

        folder_id = await self._call_storage(self.storage.create_folder, folder_name, self.root_folder_id)
        logger.info("Owner folder created: %s -> %s", folder_name, folder_id)
        return folder_id

    async def _call_storage(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except UploadServiceError:
            raise
        except Exception as e:
            logger.error("Drive call %s failed: %s", getattr(fn, "__name__", fn), e, exc_info=True)
            raise RemoteStorageError(str(e) or None) from e
