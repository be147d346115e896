# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Shared fixtures: ASGI message capture and a populated static root."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from genro_static.resolver import Resolver
from genro_static.storage import LocalStorageNode


class MockSend:
    """Capture ASGI send messages for testing."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start_message(self) -> dict[str, Any]:
        """Get the http.response.start message."""
        return self.messages[0]

    @property
    def status(self) -> int:
        return self.start_message["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start_message["headers"])

    @property
    def body(self) -> bytes:
        """Complete body (concatenated from all body messages)."""
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )


async def mock_receive() -> dict[str, Any]:
    """Mock receive callable (not used by static responses)."""
    return {"type": "http.request", "body": b"", "more_body": False}


def http_scope(path: str, method: str = "GET", **extra: Any) -> dict[str, Any]:
    """Build a minimal HTTP scope."""
    scope: dict[str, Any] = {
        "type": "http",
        "method": method,
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [],
        "client": ("127.0.0.1", 50000),
    }
    scope.update(extra)
    return scope


@pytest.fixture
def send() -> MockSend:
    return MockSend()


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A static root with files, a sub directory with index and one without."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<html>home</html>")
    (root / "style.css").write_text("body { color: red; }")
    (root / "app.js").write_text("console.log('hello');")
    (root / "data.unknownext").write_bytes(b"\x00\x01")
    (root / "README").write_text("no extension")
    (root / "sub").mkdir()
    (root / "sub" / "index.html").write_text("<html>sub</html>")
    (root / "sub" / "logo.PNG").write_bytes(b"\x89PNG\r\n")
    (root / "empty").mkdir()
    (tmp_path / "secret.txt").write_text("outside the root")
    return root


@pytest.fixture(autouse=True)
def _reset_smartasync_cache() -> None:
    """Isolate tests: smartasync caches its sync/async mode per process."""
    Resolver.resolve._smartasync_reset_cache()
    LocalStorageNode.read_bytes._smartasync_reset_cache()
