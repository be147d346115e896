# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ResponseOutcome - the tagged result of serving one request.

    Success(body, content_type)  200
    Forbidden()                  403
    NotFound()                   404
    IoError(detail)              500

The host framework (or OutcomeRenderer) turns an outcome into a transport
reply. ``IoError.detail`` is for logs only: it is excluded from ``repr`` and
never rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union

__all__ = ["OUTCOME_SCOPE_KEY", "Forbidden", "IoError", "NotFound", "ResponseOutcome", "Success"]


@dataclass(frozen=True)
class Success:
    """File read. ``content_type`` is the header value to send."""

    status_code: ClassVar[int] = 200

    body: bytes
    content_type: str

    def __repr__(self) -> str:
        return f"Success(content_type={self.content_type!r}, size={len(self.body)})"


@dataclass(frozen=True)
class NotFound:
    """No such file, or a directory without index file."""

    status_code: ClassVar[int] = 404


@dataclass(frozen=True)
class Forbidden:
    """Traversal attempt or disallowed path shape."""

    status_code: ClassVar[int] = 403


@dataclass(frozen=True)
class IoError:
    """Filesystem failure other than absence."""

    status_code: ClassVar[int] = 500

    detail: str = field(default="", repr=False)


ResponseOutcome = Union[Success, NotFound, Forbidden, IoError]

# Scope key where StaticFiles records the outcome class name for outer layers.
OUTCOME_SCOPE_KEY = "_outcome"
