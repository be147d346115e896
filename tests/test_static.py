# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the StaticFiles ASGI application."""

import logging
import os
from pathlib import Path

import pytest

from conftest import MockSend, http_scope, mock_receive

from genro_static.config import ConfigError, RouteConfig
from genro_static.middleware.errors import ErrorMiddleware
from genro_static.middleware.logging import LoggingMiddleware
from genro_static.outcome import OUTCOME_SCOPE_KEY
from genro_static.static import CONTENT_TYPE_SCOPE_KEY, StaticFiles, create_app, request_path


class TestRequestPath:
    @pytest.mark.parametrize(
        "scope,expected",
        [
            ({"path": "/static/a.css", "root_path": "/static"}, "/a.css"),
            ({"path": "/static", "root_path": "/static"}, "/"),
            ({"path": "/a.css", "root_path": ""}, "/a.css"),
            ({"path": "/other/a.css", "root_path": "/static"}, "/other/a.css"),
            ({}, "/"),
        ],
    )
    def test_request_path(self, scope: dict, expected: str) -> None:
        assert request_path(scope) == expected


class TestStaticFilesInit:
    def test_directory(self, site: Path) -> None:
        app = StaticFiles(site)
        assert app.config.root == site.resolve()

    def test_directory_with_options(self, site: Path) -> None:
        app = StaticFiles(str(site), index_filename="home.html", error_rendering=True)
        assert app.config.index_filename == "home.html"
        assert app.renderer.status_text is True

    def test_config(self, site: Path) -> None:
        config = RouteConfig(root=site)
        assert StaticFiles(config=config).config is config

    def test_neither(self) -> None:
        with pytest.raises(ConfigError):
            StaticFiles()

    def test_both(self, site: Path) -> None:
        with pytest.raises(ConfigError):
            StaticFiles(site, config=RouteConfig(root=site))

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="does not exist"):
            StaticFiles(tmp_path / "missing")

    def test_repr(self, site: Path) -> None:
        assert "index.html" in repr(StaticFiles(site))


class TestStaticFilesServing:
    """Tests for StaticFiles.__call__()."""

    @pytest.mark.asyncio
    async def test_get_file(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site)(http_scope("/style.css"), mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"text/css"
        assert send.headers[b"content-length"] == b"20"
        assert send.body == b"body { color: red; }"

    @pytest.mark.asyncio
    async def test_get_root_index(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site)(http_scope("/"), mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"text/html"
        assert send.body == b"<html>home</html>"

    @pytest.mark.asyncio
    async def test_head(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site)(http_scope("/app.js", method="HEAD"), mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"text/javascript"
        assert send.headers[b"content-length"] == b"21"
        assert send.body == b""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    async def test_method_not_allowed(self, site: Path, send: MockSend, method: str) -> None:
        await StaticFiles(site)(http_scope("/style.css", method=method), mock_receive, send)
        assert send.status == 405
        assert send.headers[b"allow"] == b"GET, HEAD"
        assert send.body == b""

    @pytest.mark.asyncio
    async def test_not_found_empty_body(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site)(http_scope("/nope.css"), mock_receive, send)
        assert send.status == 404
        assert send.body == b""
        assert b"content-type" not in send.headers

    @pytest.mark.asyncio
    async def test_not_found_with_error_rendering(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site, error_rendering=True)(http_scope("/nope.css"), mock_receive, send)
        assert send.status == 404
        assert send.body == b"404 Not Found"
        assert send.headers[b"content-type"] == b"text/plain; charset=utf-8"

    @pytest.mark.asyncio
    async def test_forbidden(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site, error_rendering=True)(http_scope("/../secret.txt"), mock_receive, send)
        assert send.status == 403
        assert send.body == b"403 Forbidden"
        assert b"outside" not in send.body

    @pytest.mark.asyncio
    async def test_directory_without_index(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site)(http_scope("/empty/"), mock_receive, send)
        assert send.status == 404

    @pytest.mark.asyncio
    async def test_mounted_under_prefix(self, site: Path, send: MockSend) -> None:
        scope = http_scope("/assets/sub/logo.PNG", root_path="/assets")
        await StaticFiles(site)(scope, mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"image/png"

    @pytest.mark.asyncio
    async def test_preset_content_type(self, site: Path, send: MockSend) -> None:
        scope = http_scope("/data.unknownext", **{CONTENT_TYPE_SCOPE_KEY: "application/x-preset"})
        await StaticFiles(site)(scope, mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"application/x-preset"

    @pytest.mark.asyncio
    async def test_non_http_ignored(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site)({"type": "lifespan"}, mock_receive, send)
        assert send.messages == []

    @pytest.mark.asyncio
    async def test_no_path_leak_in_errors(self, site: Path, send: MockSend) -> None:
        await StaticFiles(site, error_rendering=True)(http_scope("/missing/dir/x.txt"), mock_receive, send)
        assert send.status == 404
        assert str(site).encode() not in send.body
        assert b"missing" not in send.body


class TestCreateApp:
    def test_errors_outermost(self, site: Path) -> None:
        app = create_app(RouteConfig(root=site))
        assert isinstance(app, ErrorMiddleware)
        assert isinstance(app.app, StaticFiles)

    def test_access_log(self, site: Path) -> None:
        app = create_app(RouteConfig(root=site, access_log=True))
        assert isinstance(app, ErrorMiddleware)
        assert isinstance(app.app, LoggingMiddleware)
        assert isinstance(app.app.app, StaticFiles)

    @pytest.mark.asyncio
    async def test_serves(self, site: Path, send: MockSend) -> None:
        app = create_app(RouteConfig(root=site, access_log=True))
        await app(http_scope("/sub/"), mock_receive, send)
        assert send.status == 200
        assert send.body == b"<html>sub</html>"

    @pytest.mark.asyncio
    async def test_access_log_reports_outcome(
        self, site: Path, send: MockSend, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = create_app(RouteConfig(root=site, access_log=True))
        with caplog.at_level(logging.INFO, logger="genro_static.access"):
            await app(http_scope("/nope.css"), mock_receive, send)
        messages = [r.getMessage() for r in caplog.records if r.name == "genro_static.access"]
        assert len(messages) == 1
        assert messages[0].startswith("GET /nope.css -> 404 NotFound 0B ")


class TestUnresolvableNames:
    """Names the file system cannot resolve are 404, never 500."""

    @pytest.mark.asyncio
    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    async def test_symlink_loop(self, site: Path, send: MockSend) -> None:
        (site / "loop").symlink_to(site / "loop")
        scope = http_scope("/loop")
        await create_app(RouteConfig(root=site))(scope, mock_receive, send)
        assert send.status == 404
        assert scope[OUTCOME_SCOPE_KEY] == "NotFound"

    @pytest.mark.asyncio
    async def test_overlong_name(self, site: Path, send: MockSend) -> None:
        scope = http_scope("/" + "a" * 300 + ".css")
        await create_app(RouteConfig(root=site))(scope, mock_receive, send)
        assert send.status == 404
        assert scope[OUTCOME_SCOPE_KEY] == "NotFound"
