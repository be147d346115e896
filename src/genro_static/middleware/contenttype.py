# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Content-Type Middleware - fills in Content-Type from the request path.

For inner apps that send files without a content-type (a plain file app, a
proxy to a bucket). On each successful (2xx) ``http.response.start`` without
a ``content-type`` header, the type inferred from the request path's
extension is added. A header set by the inner app is never replaced.

Config:
    fallback (str): Type for unknown extensions. Default: application/octet-stream.
    mime (str): MIME source, "table" or "mimetypes". Default: "table".
    diagnostics (bool): Log fallbacks on genro_static.diagnostics. Default: False.

Example::

    app = ContentTypeMiddleware(file_app, mime="mimetypes")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..diagnostics import DiagnosticInferencer
from ..mime import DEFAULT_FALLBACK_MIME, ContentTypeInferencer, mime_source

if TYPE_CHECKING:
    from ..types import ASGIApp, Message, Receive, Scope, Send


class ContentTypeMiddleware(BaseMiddleware):
    """Adds a missing Content-Type header based on the request path.

    Class Attributes:
        middleware_name: "contenttype" - identifier for config.
        middleware_order: 800 - close to the wrapped app.
        middleware_default: False - disabled by default.
    """

    middleware_name = "contenttype"
    middleware_order = 800
    middleware_default = False

    __slots__ = ("inferencer",)

    def __init__(
        self,
        app: ASGIApp,
        fallback: str = DEFAULT_FALLBACK_MIME,
        mime: str = "table",
        diagnostics: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        inferencer = ContentTypeInferencer(mime_source(mime), fallback=fallback)
        self.inferencer: ContentTypeInferencer | DiagnosticInferencer = (
            DiagnosticInferencer(inferencer) if diagnostics else inferencer
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "/")

        async def send_with_content_type(message: Message) -> None:
            if message["type"] == "http.response.start" and 200 <= message.get("status", 200) < 300:
                headers = list(message.get("headers", []))
                if not any(name.lower() == b"content-type" for name, _ in headers):
                    content_type = self.inferencer.infer(path)
                    headers.append((b"content-type", content_type.encode("latin-1")))
                    message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_with_content_type)


if __name__ == "__main__":
    pass
