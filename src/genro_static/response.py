# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
HTTP Response for ASGI transport.

A Response is built once, then called as an ASGI application to emit
``http.response.start`` and a single ``http.response.body`` message.

Header rules
============
- ``content-type`` is added from ``media_type`` only when the given headers
  do not already carry one: a value set upstream always wins.
- ``content-length`` is added when missing and always reflects the full
  body, also for HEAD responses whose body is not sent.
- Header names are lowercased and latin-1 encoded on the wire.

Example::

    response = Response(b"body { }", media_type="text/css")
    await response(scope, receive, send)

    # HEAD: same headers, empty body message
    response = Response(b"body { }", media_type="text/css", head=True)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .types import Receive, Scope, Send

__all__ = ["Response"]

HeadersInput = Mapping[str, str] | list[tuple[str, str]] | None


def _normalize_headers(headers: HeadersInput) -> list[tuple[str, str]]:
    """Return headers as a new list of (name, value) tuples."""
    if headers is None:
        return []
    if isinstance(headers, list):
        return list(headers)
    return list(headers.items())


class Response:
    """
    HTTP response usable as an ASGI application.

    Attributes:
        body: Encoded response body.
        status_code: HTTP status code.
        head: If True the body message is sent empty.
    """

    __slots__ = ("body", "status_code", "head", "_headers")

    charset: str = "utf-8"

    def __init__(
        self,
        content: bytes | str | None = None,
        status_code: int = 200,
        headers: HeadersInput = None,
        media_type: str | None = None,
        head: bool = False,
    ) -> None:
        self.status_code = status_code
        self.head = head
        self._headers: list[tuple[str, str]] = _normalize_headers(headers)
        self.body = self._encode_content(content)

        if media_type is not None and self.get_header("content-type") is None:
            self._headers.append(("content-type", media_type))
        if self.get_header("content-length") is None:
            self._headers.append(("content-length", str(len(self.body))))

    def _encode_content(self, content: bytes | str | None) -> bytes:
        if content is None:
            return b""
        if isinstance(content, bytes):
            return content
        return content.encode(self.charset)

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Copy of the response headers."""
        return list(self._headers)

    def get_header(self, name: str) -> str | None:
        """Return the first value of header ``name`` (case-insensitive)."""
        lowered = name.lower()
        for key, value in self._headers:
            if key.lower() == lowered:
                return value
        return None

    @property
    def media_type(self) -> str | None:
        return self.get_header("content-type")

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """
        ASGI application interface.

        Args:
            scope: ASGI scope dict (unused but required by interface).
            receive: ASGI receive callable (unused but required by interface).
            send: ASGI send callable for sending response messages.
        """
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self._build_headers(),
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": b"" if self.head else self.body,
            }
        )

    def __repr__(self) -> str:
        return f"Response(status_code={self.status_code}, media_type={self.media_type!r}, size={len(self.body)})"


if __name__ == "__main__":
    import asyncio

    async def demo() -> None:
        messages: list[Any] = []

        async def send(message: Any) -> None:
            messages.append(message)

        async def receive() -> Any:
            return {"type": "http.request", "body": b""}

        await Response("Hello!", media_type="text/plain")({}, receive, send)
        for message in messages:
            print(message)

    asyncio.run(demo())
