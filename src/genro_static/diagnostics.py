# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Diagnostic wrappers - logging shells around the pure pipeline.

Enabled with ``diagnostics=True``. They log and pass results through
unchanged, so the outcome of a request is identical with or without them.

Log records (logger ``genro_static.diagnostics``):
    WARNING  Unknown MIME type for 'data/blob.xyz' (extension 'xyz'); defaulting to application/octet-stream
    ERROR    Static file I/O error on '/report.pdf': PermissionError: [Errno 13] Permission denied: ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .mime import ContentTypeInferencer, extension_of
from .outcome import IoError

if TYPE_CHECKING:
    from .outcome import ResponseOutcome
    from .pipeline import StaticPipeline

__all__ = ["DIAGNOSTICS_LOGGER", "DiagnosticInferencer", "DiagnosticPipeline"]

DIAGNOSTICS_LOGGER = "genro_static.diagnostics"


class DiagnosticInferencer:
    """ContentTypeInferencer wrapper that logs every fallback."""

    __slots__ = ("inner", "logger")

    def __init__(self, inner: ContentTypeInferencer, logger: logging.Logger | None = None) -> None:
        self.inner = inner
        self.logger = logger or logging.getLogger(DIAGNOSTICS_LOGGER)

    @property
    def fallback(self) -> str:
        return self.inner.fallback

    def lookup(self, path: str) -> str | None:
        return self.inner.lookup(path)

    def infer(self, path: str) -> str:
        mime = self.inner.lookup(path)
        if mime is not None:
            return mime
        self.logger.warning(
            "Unknown MIME type for %r (extension %r); defaulting to %s",
            path,
            extension_of(path),
            self.inner.fallback,
        )
        return self.inner.fallback


class DiagnosticPipeline:
    """StaticPipeline wrapper that logs every IoError outcome with its detail."""

    __slots__ = ("inner", "logger")

    def __init__(self, inner: StaticPipeline, logger: logging.Logger | None = None) -> None:
        self.inner = inner
        self.logger = logger or logging.getLogger(DIAGNOSTICS_LOGGER)

    @property
    def inferencer(self) -> ContentTypeInferencer | DiagnosticInferencer:
        return self.inner.inferencer

    async def serve(self, request_path: str, content_type: str | None = None) -> ResponseOutcome:
        outcome = await self.inner.serve(request_path, content_type)
        if isinstance(outcome, IoError):
            self.logger.error("Static file I/O error on %r: %s", request_path, outcome.detail)
        return outcome
