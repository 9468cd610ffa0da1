# app/domain/storage.py
from typing import Protocol


class RemoteStorage(Protocol):
    """
    Capacidades que el orquestador consume del almacenamiento remoto.

    Las implementaciones son síncronas (bloqueantes); el orquestador las
    ejecuta en un hilo de trabajo.
    """

    def find_folders(self, name: str, parent_id: str) -> list[str]:
        """IDs de carpetas no eliminadas llamadas exactamente `name` bajo `parent_id`."""
        ...

    def create_folder(self, name: str, parent_id: str) -> str:
        ...

    def create_or_update_file(self, name: str, parent_id: str, content: str) -> dict:
        """Devuelve un dict con al menos 'id' y 'name'."""
        ...
