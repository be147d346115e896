# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""OutcomeRenderer - presentation layer from ResponseOutcome to Response.

Status codes:
    Success   -> 200, body = file bytes, content-type = outcome.content_type
    Forbidden -> 403
    NotFound  -> 404
    IoError   -> 500

Error bodies:
    status_text=False  empty body
    status_text=True   "<code> <reason phrase>", e.g. "404 Not Found"

No error body ever contains a path or IoError detail.
"""

from __future__ import annotations

from http import HTTPStatus

from .outcome import ResponseOutcome, Success
from .response import Response

__all__ = ["OutcomeRenderer", "status_line"]

ERROR_MEDIA_TYPE = "text/plain; charset=utf-8"


def status_line(status_code: int) -> str:
    """Return "<code> <reason phrase>" for ``status_code``."""
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return str(status_code)
    return f"{status_code} {phrase}"


class OutcomeRenderer:
    """Builds transport responses from outcomes.

    Attributes:
        status_text: Put the status line in error bodies.
    """

    __slots__ = ("status_text",)

    def __init__(self, status_text: bool = False) -> None:
        self.status_text = status_text

    def render(self, outcome: ResponseOutcome, head: bool = False) -> Response:
        """Return the Response for ``outcome``.

        Args:
            outcome: Pipeline result.
            head: Build a HEAD response (headers only).
        """
        if isinstance(outcome, Success):
            return Response(outcome.body, media_type=outcome.content_type, head=head)
        return self.error(outcome.status_code, head=head)

    def error(self, status_code: int, head: bool = False, headers: dict[str, str] | None = None) -> Response:
        """Return an error Response for ``status_code``."""
        body = status_line(status_code) if self.status_text else ""
        return Response(
            body,
            status_code=status_code,
            headers=headers,
            media_type=ERROR_MEDIA_TYPE if body else None,
            head=head,
        )
