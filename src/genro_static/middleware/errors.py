# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error handling middleware.

Last line of defence: any exception escaping the wrapped app becomes a
generic ``500 Internal Server Error`` and is logged with its traceback on the
``genro_static.errors`` logger. The body never carries exception details.

If the response was already started the exception is logged and re-raised,
because a second ``http.response.start`` would break the ASGI protocol.

Note:
    Enabled by default (middleware_default=True) and outermost
    (middleware_order=100).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..response import Response

if TYPE_CHECKING:
    from ..types import ASGIApp, Message, Receive, Scope, Send


class ErrorMiddleware(BaseMiddleware):
    """Turns unexpected exceptions into 500 responses.

    Class Attributes:
        middleware_name: "errors" - identifier for config.
        middleware_order: 100 - runs first to catch all errors.
        middleware_default: True - enabled by default.
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    __slots__ = ("logger",)

    def __init__(self, app: ASGIApp, logger_name: str = "genro_static.errors", **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception:
            self.logger.exception("Unhandled error serving %s", scope.get("path", "/"))
            if started:
                raise
            response = Response(
                "Internal Server Error",
                status_code=500,
                media_type="text/plain; charset=utf-8",
            )
            await response(scope, receive, send)


if __name__ == "__main__":
    pass
