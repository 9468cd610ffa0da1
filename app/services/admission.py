# app/services/admission.py
"""
Control de admisión para las llamadas a Google Drive.

Un pool fijo de slots activos más una fila FIFO acotada. Cuando todos los
slots están ocupados las solicitudes esperan en la fila; si la fila también
está llena se rechazan de inmediato con QueueFullError (HTTP 429).

Al liberar un slot con gente esperando, el slot pasa directo al más antiguo
de la fila: `active` no baja, uno entra en el lugar del otro.
"""
from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Deque, Optional, TypeVar

from app.domain.errors import QueueFullError, QueueTimeoutError
from app.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class AdmissionController:
    """
    Limita las operaciones concurrentes hacia un recurso escaso.

    Todo el estado se modifica desde el event loop (scheduling cooperativo),
    por eso no hace falta lock. No compartir una instancia entre event loops
    ni tocarla desde hilos de trabajo.
    """

    def __init__(
        self,
        max_active: int = 5,
        max_queue: int = 50,
        wait_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            max_active: Slots que pueden estar en uso a la vez (C).
            max_queue: Solicitudes que pueden esperar un slot (Q).
            wait_timeout: Segundos máximos en la fila. None = esperar indefinidamente.
        """
        if max_active < 1:
            raise ValueError("max_active must be >= 1")
        if max_queue < 0:
            raise ValueError("max_queue must be >= 0")
        if wait_timeout is not None and wait_timeout <= 0:
            raise ValueError("wait_timeout must be positive")

        self._max_active = max_active
        self._max_queue = max_queue
        self._wait_timeout = wait_timeout
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def active(self) -> int:
        return self._active

    @property
    def queued(self) -> int:
        return len(self._waiters)

    @property
    def max_active(self) -> int:
        return self._max_active

    @property
    def max_queue(self) -> int:
        return self._max_queue

    async def acquire(self) -> None:
        """
        Obtiene un slot, esperando en la fila si hace falta.

        Raises:
            QueueFullError: Pool y fila llenos. Se lanza sin suspender.
            QueueTimeoutError: Se superó wait_timeout esperando en la fila.
        """
        if self._active < self._max_active:
            self._active += 1
            return

        if len(self._waiters) >= self._max_queue:
            logger.warning(
                "Admission rejected: active=%d/%d queued=%d/%d",
                self._active, self._max_active, len(self._waiters), self._max_queue,
            )
            raise QueueFullError()

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug("Queued for a slot: position=%d", len(self._waiters))

        try:
            if self._wait_timeout is None:
                await waiter
            else:
                await asyncio.wait_for(waiter, self._wait_timeout)
        except (asyncio.CancelledError, asyncio.TimeoutError) as e:
            if waiter.done() and not waiter.cancelled():
                # El slot ya nos fue entregado: pasarlo al siguiente
                self.release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            if isinstance(e, asyncio.TimeoutError):
                logger.warning("Gave up waiting for a slot after %.1fs", self._wait_timeout)
                raise QueueTimeoutError() from e
            raise

    def release(self) -> None:
        """Devuelve un slot. Llamar exactamente una vez por cada acquire() exitoso."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active = max(0, self._active - 1)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    async def with_slot(self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Ejecuta `operation` dentro de un slot; el slot se libera aunque falle."""
        async with self.slot():
            return await operation(*args, **kwargs)
