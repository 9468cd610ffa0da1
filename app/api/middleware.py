# app/api/middleware.py
from typing import Iterable

from fastapi import status
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.api.routes import error_response
from app.logger import get_logger

logger = get_logger(__name__)


class UploadBodyLimitMiddleware:
    """
    Límite de tamaño del body en las rutas de upload.

    Usa Content-Length cuando viene, pero el límite real se aplica sobre los
    bytes recibidos: el body se lee completo (hasta el límite) antes de
    pasarlo a la app, así un body chunked tampoco lo salta.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int, paths: Iterable[str]) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes
        self.paths = frozenset(paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "POST" or scope["path"] not in self.paths:
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                await error_response(status.HTTP_400_BAD_REQUEST, "Content-Length inválido.")(scope, receive, send)
                return
            if declared > self.max_body_bytes:
                await self._reject(scope, receive, send, declared)
                return

        body = bytearray()
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            if len(body) > self.max_body_bytes:
                await self._reject(scope, receive, send, len(body))
                return
            more_body = message.get("more_body", False)

        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": bytes(body), "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning("Rejected oversized payload: %d+ bytes (limit %d)", size, self.max_body_bytes)
        response = error_response(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Payload muy grande.")
        await response(scope, receive, send)
