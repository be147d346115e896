# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ResponseAssembler - reads a resolved file into a ResponseOutcome."""

from __future__ import annotations

from .outcome import IoError, NotFound, ResponseOutcome, Success
from .resolver import ResolvedPath

__all__ = ["ResponseAssembler", "describe_error"]

# Errors meaning "the file is gone", e.g. deleted or replaced by a
# directory between resolve and read.
MISSING_ERRORS = (FileNotFoundError, NotADirectoryError, IsADirectoryError)


def describe_error(error: OSError) -> str:
    """Return "<ExceptionName>: <message>" for logs."""
    return f"{type(error).__name__}: {error}"


class ResponseAssembler:
    """Reads file bytes and pairs them with a content-type.

    Stateless: one instance serves every request concurrently.
    """

    __slots__ = ()

    async def assemble(
        self,
        resolved: ResolvedPath,
        content_type: str,
        existing: str | None = None,
    ) -> ResponseOutcome:
        """Read ``resolved`` and build the outcome.

        Args:
            resolved: File returned by the resolver.
            content_type: Inferred content-type.
            existing: Content-type already set upstream. When present it is
                kept and ``content_type`` is discarded.

        Returns:
            Success, NotFound (file vanished since resolution) or IoError.
        """
        try:
            body = await resolved.node.read_bytes()
        except MISSING_ERRORS:
            return NotFound()
        except OSError as e:
            return IoError(detail=describe_error(e))

        return Success(body=body, content_type=existing if existing is not None else content_type)
