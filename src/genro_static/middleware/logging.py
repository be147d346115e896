# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Logging Middleware - one access-log line per static request.

Line format (logger ``genro_static.access``):
    GET /css/site.css?v=3 -> 200 Success 1532B 0.8ms [192.168.1.1]
    GET /missing.js -> 404 NotFound 0B 0.3ms [192.168.1.1]
    HEAD /docs/ -> 200 Success 0B 0.4ms [unknown]

The outcome column is the class name StaticFiles records in
``scope["_outcome"]`` (Success, NotFound, Forbidden, IoError); ``-`` when the
inner app is not a StaticFiles (405, or another ASGI app). The size column
counts the body bytes actually sent, so HEAD requests log 0B.

Lines for outcomes in ``quiet`` (default: none) are logged at DEBUG, so a
busy site can keep 200s out of the log while still seeing 404s and 500s.

Config:
    logger_name (str): Logger name. Default: "genro_static.access".
    level (str): Log level for normal lines. Default: "INFO".
    quiet (str | list[str]): Outcome names logged at DEBUG. Default: none.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..outcome import OUTCOME_SCOPE_KEY

if TYPE_CHECKING:
    from ..types import ASGIApp, Message, Receive, Scope, Send


class LoggingMiddleware(BaseMiddleware):
    """Access logging for static requests.

    Attributes:
        logger: Logger the access lines go to.
        level: Numeric level of normal lines.
        quiet: Outcome names demoted to DEBUG.

    Class Attributes:
        middleware_name: "logging" - identifier for config.
        middleware_order: 200 - inside errors, outside everything else.
        middleware_default: False - disabled by default.
    """

    middleware_name = "logging"
    middleware_order = 200
    middleware_default = False

    __slots__ = ("logger", "level", "quiet")

    def __init__(
        self,
        app: ASGIApp,
        logger_name: str = "genro_static.access",
        level: str = "INFO",
        quiet: str | list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)
        self.level = getattr(logging, level.upper(), logging.INFO)
        if isinstance(quiet, str):
            quiet = [name.strip() for name in quiet.split(",")]
        self.quiet = frozenset(name for name in quiet or () if name)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Serve the request and log it once it completes; errors are logged and re-raised."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status_code = 0
        sent = 0

        async def counting_send(message: Message) -> None:
            nonlocal status_code, sent
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body":
                sent += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, counting_send)
        except Exception as e:
            self.logger.error(
                "%s -> ERROR %s %.1fms [%s]",
                _request_line(scope), type(e).__name__, _elapsed_ms(start_time), _client(scope),
            )
            raise

        outcome = scope.get(OUTCOME_SCOPE_KEY, "-")
        level = logging.DEBUG if outcome in self.quiet else self.level
        self.logger.log(
            level,
            "%s -> %d %s %dB %.1fms [%s]",
            _request_line(scope), status_code, outcome, sent, _elapsed_ms(start_time), _client(scope),
        )


def _request_line(scope: Scope) -> str:
    """Return "METHOD /path?query"."""
    line = f"{scope.get('method', '?')} {scope.get('path', '/')}"
    query = scope.get("query_string", b"")
    if query:
        line += "?" + query.decode("latin-1")
    return line


def _client(scope: Scope) -> str:
    client = scope.get("client")
    return client[0] if client else "unknown"


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000


if __name__ == "__main__":
    pass
