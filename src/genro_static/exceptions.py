# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes raised while resolving static paths.

The resolver signals the two "expected" failures with exceptions; the
pipeline catches them and turns them into ``Forbidden`` / ``NotFound``
outcomes, so they never reach the host framework.

Module Structure
----------------
StaticError
    Common base. Carries the offending request path for logging only.
PathForbidden
    Traversal attempt (``..`` segment), disallowed path shape (NUL byte,
    backslash) or a candidate that resolves outside the root.
PathNotFound
    No such file, including a directory whose index file is missing.

Design Decisions
----------------
- The request path is stored on the exception but ``str(exc)`` only holds
  the short reason. Renderers never use either; they render the outcome.
- Filesystem errors (``OSError``) are not wrapped: the assembler and the
  pipeline classify them into ``IoError`` outcomes directly.

Example:
    >>> try:
    ...     resolver.resolve("/../etc/passwd")
    ... except PathForbidden as e:
    ...     print(e.reason)
    parent segment
"""

from __future__ import annotations

__all__ = ["StaticError", "PathForbidden", "PathNotFound"]


class StaticError(Exception):
    """
    Base class for resolution failures.

    Attributes:
        path: The request path that failed to resolve.
        reason: Short reason, safe to log.
    """

    default_reason = "static error"

    def __init__(self, path: str, reason: str | None = None) -> None:
        """
        Initialize the error.

        Args:
            path: Request path as received from the host framework.
            reason: Short reason. Defaults to the class ``default_reason``.
        """
        self.path = path
        self.reason = reason or self.default_reason
        super().__init__(self.reason)

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"{type(self).__name__}(path={self.path!r}, reason={self.reason!r})"


class PathForbidden(StaticError):
    """Request path is not allowed to leave the root."""

    default_reason = "forbidden path"


class PathNotFound(StaticError):
    """Request path does not name an existing file under the root."""

    default_reason = "not found"
