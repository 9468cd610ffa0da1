# tests/conftest.py
import threading
import time
from typing import Optional

import pytest

from app.config.settings import Settings


class FakeDriveStorage:
    """
    Almacenamiento en memoria que registra cada llamada.

    Si se pasa `gate`, todas las llamadas se bloquean hasta que el evento
    se active (simula un Drive que no responde).
    """

    def __init__(
        self,
        folders: Optional[dict] = None,
        gate: Optional[threading.Event] = None,
        fail_on: Optional[dict] = None,
        delay: float = 0.0,
    ) -> None:
        self.folders = {name: list(ids) for name, ids in (folders or {}).items()}
        self.gate = gate
        self.fail_on = fail_on or {}
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()
        self._counter = 0

    def _enter(self, method: str, *args) -> None:
        if self.gate is not None:
            assert self.gate.wait(timeout=10), "gate never opened"
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.calls.append((method, *args))
        if method in self.fail_on:
            raise self.fail_on[method]

    def _next_id(self, prefix: str) -> str:
        with self._lock:
            self._counter += 1
            return f"{prefix}-{self._counter}"

    def calls_to(self, method: str) -> list:
        return [c for c in self.calls if c[0] == method]

    def find_folders(self, name: str, parent_id: str) -> list[str]:
        self._enter("find_folders", name, parent_id)
        return list(self.folders.get(name, []))

    def create_folder(self, name: str, parent_id: str) -> str:
        self._enter("create_folder", name, parent_id)
        folder_id = self._next_id("folder")
        with self._lock:
            self.folders.setdefault(name, []).append(folder_id)
        return folder_id

    def create_or_update_file(self, name: str, parent_id: str, content: str) -> dict:
        self._enter("create_or_update_file", name, parent_id, content)
        return {"id": self._next_id("file"), "name": name, "parents": [parent_id]}


def make_settings(**overrides) -> Settings:
    values = {
        "gdrive_folder_id": "root-folder",
        "max_drive_concurrency": 5,
        "max_queue": 50,
        "retry_after_seconds": 3,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def storage() -> FakeDriveStorage:
    return FakeDriveStorage()


@pytest.fixture(name="make_settings")
def make_settings_fixture():
    return make_settings
