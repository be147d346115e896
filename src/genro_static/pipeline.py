# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""StaticPipeline - Resolve -> Infer -> Assemble, one request at a time.

The pipeline is the single entry point of the core:

    pipeline = build_pipeline(RouteConfig(root="./public"))
    outcome = await pipeline.serve("/css/site.css")
    outcome = await pipeline.serve("/data.bin", content_type="text/csv")

It is stateless and re-entrant. ``build_pipeline`` composes the optional
diagnostic shells around it from the configuration; the core itself has no
logging branches.
"""

from __future__ import annotations

from typing import Protocol

from .assembler import ResponseAssembler, describe_error
from .config import RouteConfig
from .diagnostics import DiagnosticInferencer, DiagnosticPipeline
from .exceptions import PathForbidden, PathNotFound
from .mime import ContentTypeInferencer, mime_source
from .outcome import Forbidden, IoError, NotFound, ResponseOutcome
from .resolver import Resolver
from .storage import LocalStorage

__all__ = ["Inferencer", "Pipeline", "StaticPipeline", "build_pipeline"]


class Inferencer(Protocol):
    """What the pipeline needs from a content-type inferencer."""

    @property
    def fallback(self) -> str: ...

    def lookup(self, path: str) -> str | None: ...

    def infer(self, path: str) -> str: ...


class Pipeline(Protocol):
    """Anything that serves a request path into an outcome."""

    @property
    def inferencer(self) -> Inferencer: ...

    async def serve(self, request_path: str, content_type: str | None = None) -> ResponseOutcome: ...


class StaticPipeline:
    """Chains Resolver, inferencer and ResponseAssembler.

    Attributes:
        resolver: Maps request paths to files.
        inferencer: Maps resolved paths to content-types.
        assembler: Reads files into outcomes.
    """

    __slots__ = ("resolver", "inferencer", "assembler")

    def __init__(
        self,
        resolver: Resolver,
        inferencer: Inferencer,
        assembler: ResponseAssembler | None = None,
    ) -> None:
        self.resolver = resolver
        self.inferencer = inferencer
        self.assembler = assembler or ResponseAssembler()

    async def serve(self, request_path: str, content_type: str | None = None) -> ResponseOutcome:
        """Serve ``request_path``.

        Args:
            request_path: Path relative to the mount point, e.g. "/a/b.css".
            content_type: Content-type already set by upstream middleware.
                Kept as-is on success.

        Returns:
            Success, NotFound, Forbidden or IoError. Never raises for
            filesystem conditions.
        """
        try:
            resolved = await self.resolver.resolve(request_path)
        except PathForbidden:
            return Forbidden()
        except PathNotFound:
            return NotFound()
        except OSError as e:
            return IoError(detail=describe_error(e))

        inferred = self.inferencer.infer(resolved.path)
        return await self.assembler.assemble(resolved, inferred, content_type)


def build_pipeline(config: RouteConfig, storage: LocalStorage | None = None) -> Pipeline:
    """Build the pipeline described by ``config``.

    Args:
        config: Route configuration.
        storage: Storage to serve from. Defaults to ``LocalStorage(config.root)``.

    Returns:
        A StaticPipeline, wrapped in DiagnosticPipeline (with a
        DiagnosticInferencer inside) when ``config.diagnostics`` is on.
    """
    storage = storage or LocalStorage(config.root)
    resolver = Resolver(storage, index_filename=config.index_filename)
    inferencer = ContentTypeInferencer(mime_source(config.mime_source), fallback=config.fallback_mime)

    if not config.diagnostics:
        return StaticPipeline(resolver, inferencer)
    return DiagnosticPipeline(StaticPipeline(resolver, DiagnosticInferencer(inferencer)))
