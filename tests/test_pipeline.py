# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for StaticPipeline, ResponseAssembler and build_pipeline."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import pytest

from genro_static.assembler import ResponseAssembler, describe_error
from genro_static.config import RouteConfig
from genro_static.diagnostics import DiagnosticInferencer, DiagnosticPipeline
from genro_static.mime import ContentTypeInferencer
from genro_static.outcome import Forbidden, IoError, NotFound, Success
from genro_static.pipeline import StaticPipeline, build_pipeline
from genro_static.resolver import ResolvedPath, Resolver
from genro_static.storage import LocalStorage


class FailingNode:
    """Storage node whose read always fails with ``error``."""

    def __init__(self, error: OSError, path: str = "report.pdf") -> None:
        self.error = error
        self.path = path
        self.absolute_path = Path("/nowhere") / path
        self.basename = path
        self.isfile = True
        self.isdir = False
        self.contained = True

    def child(self, *parts: str) -> FailingNode:
        return self

    async def read_bytes(self) -> bytes:
        raise self.error


class FailingResolver:
    """Resolver whose lookup fails with ``error``."""

    def __init__(self, error: OSError) -> None:
        self.error = error

    async def resolve(self, request_path: str) -> ResolvedPath:
        raise self.error


@pytest.fixture
def pipeline(site: Path) -> StaticPipeline:
    return build_pipeline(RouteConfig(root=site))  # type: ignore[return-value]


class TestStaticPipeline:
    @pytest.mark.asyncio
    async def test_serves_file(self, pipeline: StaticPipeline) -> None:
        outcome = await pipeline.serve("/style.css")
        assert outcome == Success(body=b"body { color: red; }", content_type="text/css")

    @pytest.mark.asyncio
    async def test_serves_index(self, pipeline: StaticPipeline) -> None:
        outcome = await pipeline.serve("/sub/")
        assert isinstance(outcome, Success)
        assert outcome.body == b"<html>sub</html>"
        assert outcome.content_type == "text/html"

    @pytest.mark.asyncio
    async def test_uppercase_extension(self, pipeline: StaticPipeline) -> None:
        outcome = await pipeline.serve("/sub/logo.PNG")
        assert isinstance(outcome, Success)
        assert outcome.content_type == "image/png"

    @pytest.mark.asyncio
    async def test_unknown_extension_fallback(self, pipeline: StaticPipeline) -> None:
        outcome = await pipeline.serve("/data.unknownext")
        assert outcome == Success(body=b"\x00\x01", content_type="application/octet-stream")

    @pytest.mark.asyncio
    async def test_no_extension_fallback(self, pipeline: StaticPipeline) -> None:
        outcome = await pipeline.serve("/README")
        assert isinstance(outcome, Success)
        assert outcome.content_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_configured_fallback(self, site: Path) -> None:
        pipeline = build_pipeline(RouteConfig(root=site, fallback_mime="text/plain"))
        outcome = await pipeline.serve("/README")
        assert isinstance(outcome, Success)
        assert outcome.content_type == "text/plain"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [0, 1, 70_000])
    async def test_body_is_exact(self, site: Path, pipeline: StaticPipeline, size: int) -> None:
        data = os.urandom(size)
        (site / f"blob{size}.bin").write_bytes(data)
        outcome = await pipeline.serve(f"/blob{size}.bin")
        assert isinstance(outcome, Success)
        assert outcome.body == data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_path", ["/../secret.txt", "/sub/../../secret.txt", "/a\\b", "/x\x00"])
    async def test_forbidden(self, pipeline: StaticPipeline, request_path: str) -> None:
        assert await pipeline.serve(request_path) == Forbidden()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_path", ["/nope.css", "/empty/", "/empty", "/style.css/"])
    async def test_not_found(self, pipeline: StaticPipeline, request_path: str) -> None:
        assert await pipeline.serve(request_path) == NotFound()

    @pytest.mark.asyncio
    async def test_preset_content_type_kept(self, pipeline: StaticPipeline) -> None:
        outcome = await pipeline.serve("/style.css", content_type="text/x-custom")
        assert isinstance(outcome, Success)
        assert outcome.content_type == "text/x-custom"

    @pytest.mark.asyncio
    async def test_preset_content_type_ignored_on_error(self, pipeline: StaticPipeline) -> None:
        assert await pipeline.serve("/nope.css", content_type="text/x-custom") == NotFound()

    @pytest.mark.asyncio
    async def test_lookup_error_is_io_error(self, site: Path) -> None:
        inferencer = ContentTypeInferencer()
        pipeline = StaticPipeline(FailingResolver(PermissionError(13, "Permission denied")), inferencer)  # type: ignore[arg-type]
        outcome = await pipeline.serve("/style.css")
        assert isinstance(outcome, IoError)
        assert outcome.status_code == 500
        assert "PermissionError" in outcome.detail

    @pytest.mark.asyncio
    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    async def test_symlink_loop_is_not_found(self, site: Path, pipeline: StaticPipeline) -> None:
        (site / "loop").symlink_to(site / "loop")
        assert await pipeline.serve("/loop") == NotFound()
        assert await pipeline.serve("/loop/") == NotFound()

    @pytest.mark.asyncio
    async def test_overlong_name_is_not_found(
        self, site: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        pipeline = build_pipeline(RouteConfig(root=site, diagnostics=True))
        with caplog.at_level(logging.WARNING):
            outcome = await pipeline.serve("/" + "a" * 300 + ".css")
        assert outcome == NotFound()
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    @pytest.mark.asyncio
    async def test_file_removed_after_resolve(self, site: Path) -> None:
        storage = LocalStorage(site)
        resolver = Resolver(storage)
        resolved = await resolver.resolve("/style.css")
        (site / "style.css").unlink()

        outcome = await ResponseAssembler().assemble(resolved, "text/css")
        assert outcome == NotFound()

    @pytest.mark.asyncio
    async def test_concurrent_requests(self, site: Path, pipeline: StaticPipeline) -> None:
        for i in range(50):
            (site / f"file{i}.txt").write_text(f"content {i}")

        paths = [f"/file{i % 50}.txt" for i in range(150)]
        outcomes = await asyncio.gather(*(pipeline.serve(p) for p in paths))

        for path, outcome in zip(paths, outcomes):
            assert isinstance(outcome, Success)
            assert outcome.body == f"content {path[5:-4]}".encode()
            assert outcome.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_same_request_twice(self, pipeline: StaticPipeline) -> None:
        first = await pipeline.serve("/app.js")
        second = await pipeline.serve("/app.js")
        assert first == second


class TestResponseAssembler:
    @pytest.mark.asyncio
    async def test_success(self, site: Path) -> None:
        resolved = ResolvedPath(node=LocalStorage(site).node("app.js"))
        outcome = await ResponseAssembler().assemble(resolved, "text/javascript")
        assert outcome == Success(body=b"console.log('hello');", content_type="text/javascript")

    @pytest.mark.asyncio
    async def test_existing_wins(self, site: Path) -> None:
        resolved = ResolvedPath(node=LocalStorage(site).node("app.js"))
        outcome = await ResponseAssembler().assemble(resolved, "text/javascript", "application/x-js")
        assert isinstance(outcome, Success)
        assert outcome.content_type == "application/x-js"

    @pytest.mark.asyncio
    async def test_permission_error(self) -> None:
        resolved = ResolvedPath(node=FailingNode(PermissionError(13, "Permission denied")))
        outcome = await ResponseAssembler().assemble(resolved, "application/pdf")
        assert isinstance(outcome, IoError)
        assert outcome.detail.startswith("PermissionError:")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [FileNotFoundError(2, "gone"), IsADirectoryError(21, "dir"), NotADirectoryError(20, "nodir")])
    async def test_missing_is_not_found(self, error: OSError) -> None:
        resolved = ResolvedPath(node=FailingNode(error))
        assert await ResponseAssembler().assemble(resolved, "text/plain") == NotFound()

    def test_describe_error(self) -> None:
        assert describe_error(OSError("disk on fire")) == "OSError: disk on fire"


class TestBuildPipeline:
    def test_plain(self, site: Path) -> None:
        pipeline = build_pipeline(RouteConfig(root=site))
        assert isinstance(pipeline, StaticPipeline)
        assert isinstance(pipeline.inferencer, ContentTypeInferencer)
        assert pipeline.resolver.index_filename == "index.html"

    def test_diagnostics_wraps(self, site: Path) -> None:
        pipeline = build_pipeline(RouteConfig(root=site, diagnostics=True))
        assert isinstance(pipeline, DiagnosticPipeline)
        assert isinstance(pipeline.inferencer, DiagnosticInferencer)

    def test_mime_source(self, site: Path) -> None:
        pipeline = build_pipeline(RouteConfig(root=site, mime_source="mimetypes"))
        assert pipeline.inferencer.infer("a.css") == "text/css"

    def test_custom_storage(self, site: Path) -> None:
        storage = LocalStorage(site / "sub")
        pipeline = build_pipeline(RouteConfig(root=site), storage=storage)
        assert pipeline.resolver.storage is storage  # type: ignore[attr-defined]


class TestOutcomes:
    def test_status_codes(self) -> None:
        assert Success(b"", "text/plain").status_code == 200
        assert Forbidden().status_code == 403
        assert NotFound().status_code == 404
        assert IoError("x").status_code == 500

    def test_io_error_repr_hides_detail(self) -> None:
        assert "secret" not in repr(IoError(detail="PermissionError: /srv/secret"))

    def test_success_repr_hides_body(self) -> None:
        assert repr(Success(b"abc", "text/plain")) == "Success(content_type='text/plain', size=3)"
