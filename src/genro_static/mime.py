# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Content-Type inference from file extensions.

Two interchangeable data sources share the ``extension -> content-type | None``
contract:

- ``TableMimeSource``: the hand-maintained ``MIME_TYPES`` table, frozen at
  import time. Default.
- ``MimetypesSource``: a dedicated ``mimetypes.MimeTypes`` database built
  from Python's own table, with the common web types pinned.

``ContentTypeInferencer`` wraps a source and applies the fallback policy:
unknown or missing extensions map to ``fallback`` (default
``application/octet-stream``). It never raises and knows nothing about
headers already set on a response.

Usage:
    inferencer = ContentTypeInferencer()
    inferencer.infer("css/site.CSS")      # "text/css"
    inferencer.infer("archive.unknown")   # "application/octet-stream"
    inferencer.lookup("archive.unknown")  # None
"""

from __future__ import annotations

import mimetypes
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Protocol, runtime_checkable

__all__ = [
    "DEFAULT_FALLBACK_MIME",
    "MIME_TYPES",
    "MIME_SOURCES",
    "ContentTypeInferencer",
    "MimeSource",
    "MimetypesSource",
    "TableMimeSource",
    "extension_of",
    "mime_source",
]

DEFAULT_FALLBACK_MIME = "application/octet-stream"

_ENTRIES: dict[str, str] = {
    "html": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "ttf": "font/ttf",
    "woff": "font/woff",
    "woff2": "font/woff2",
    "eot": "application/vnd.ms-fontobject",
    "otf": "font/otf",
    "txt": "text/plain",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "xml": "application/xml",
    "zip": "application/zip",
    "rar": "application/x-rar-compressed",
    "7z": "application/x-7z-compressed",
    "gz": "application/gzip",
    "tar": "application/x-tar",
    "swf": "application/x-shockwave-flash",
    "flv": "video/x-flv",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
    "mp4": "video/mp4",
    "f4v": "video/mp4",
    "f4p": "video/mp4",
    "f4a": "video/mp4",
    "f4b": "video/mp4",
    "mp3": "audio/mpeg",
    "wav": "audio/x-wav",
    "ogg": "audio/ogg",
    "webm": "video/webm",
    "mpg": "video/mpeg",
    "mpeg": "video/mpeg",
    "mpe": "video/mpeg",
    "mp2": "video/mpeg",
    "m4v": "video/x-m4v",
    "3gp": "video/3gpp",
    "3g2": "video/3gpp2",
    "mkv": "video/x-matroska",
    "amv": "video/x-matroska",
    "m3u": "audio/x-mpegurl",
    "m3u8": "application/vnd.apple.mpegurl",
    "ts": "video/mp2t",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "psd": "image/vnd.adobe.photoshop",
    "ai": "application/postscript",
    "eps": "application/postscript",
    "ps": "application/postscript",
    "dwg": "image/vnd.dwg",
    "dxf": "image/vnd.dxf",
    "rtf": "application/rtf",
    "odt": "application/vnd.oasis.opendocument.text",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",
    "wasm": "application/wasm",
}

# Read-only, shared by every request. Keys: lowercase, no leading dot.
MIME_TYPES: Mapping[str, str] = MappingProxyType(_ENTRIES)


def extension_of(path: str) -> str:
    """Return the lowercase extension of the last path segment, or "".

    The extension is the text after the last ``.`` of the final segment:
    ``"a/b.tar.GZ"`` gives ``"gz"``, ``"a.d/readme"`` gives ``""``.
    """
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


@runtime_checkable
class MimeSource(Protocol):
    """Maps a normalized extension to a content-type, or None if unknown."""

    def get(self, extension: str) -> str | None:
        """Return the content-type for ``extension`` (lowercase, no dot)."""
        ...


class TableMimeSource:
    """MimeSource backed by a static mapping (``MIME_TYPES`` by default)."""

    __slots__ = ("_table",)

    def __init__(self, table: Mapping[str, str] | None = None) -> None:
        if table is None:
            self._table = MIME_TYPES
        else:
            self._table = MappingProxyType({k.lower().lstrip("."): v for k, v in table.items()})

    def get(self, extension: str) -> str | None:
        if not extension:
            return None
        return self._table.get(extension)

    def __repr__(self) -> str:
        return f"TableMimeSource({len(self._table)} entries)"


class MimetypesSource:
    """MimeSource backed by a private ``mimetypes.MimeTypes`` database.

    The database starts from Python's built-in table (much broader than
    ``MIME_TYPES``) and pins the web types whose value changed across Python
    releases, so common assets resolve the same way everywhere. The global
    ``mimetypes`` registry is left untouched.
    """

    __slots__ = ("_db",)

    _WEB_TYPES = (
        ("text/javascript", ".js"),
        ("text/javascript", ".mjs"),
        ("text/css", ".css"),
        ("image/svg+xml", ".svg"),
        ("application/json", ".json"),
        ("text/html", ".html"),
        ("text/html", ".htm"),
        ("application/wasm", ".wasm"),
        ("font/woff2", ".woff2"),
    )

    def __init__(self) -> None:
        self._db = mimetypes.MimeTypes()
        for mime, ext in self._WEB_TYPES:
            self._db.add_type(mime, ext)

    def get(self, extension: str) -> str | None:
        if not extension:
            return None
        mime, _ = self._db.guess_type(f"file.{extension}", strict=False)
        return mime

    def __repr__(self) -> str:
        return "MimetypesSource()"


# Available sources, keyed by the ``mime_source`` config value.
MIME_SOURCES: dict[str, Callable[[], MimeSource]] = {
    "table": TableMimeSource,
    "mimetypes": MimetypesSource,
}


def mime_source(name: str) -> MimeSource:
    """Build the MimeSource registered under ``name``.

    Raises:
        ValueError: if ``name`` is not a known source.
    """
    try:
        factory = MIME_SOURCES[name]
    except KeyError:
        known = ", ".join(sorted(MIME_SOURCES))
        raise ValueError(f"Unknown MIME source '{name}' (known: {known})") from None
    return factory()


class ContentTypeInferencer:
    """Pure ``path -> content-type`` function with a fixed fallback.

    Attributes:
        source: The MimeSource consulted for known extensions.
        fallback: Content-type returned when the source has no entry.
    """

    __slots__ = ("source", "fallback")

    def __init__(
        self,
        source: MimeSource | None = None,
        fallback: str = DEFAULT_FALLBACK_MIME,
    ) -> None:
        self.source: MimeSource = source if source is not None else TableMimeSource()
        self.fallback = fallback

    def lookup(self, path: str) -> str | None:
        """Return the mapped content-type for ``path``, None if unmapped."""
        return self.source.get(extension_of(path))

    def infer(self, path: str) -> str:
        """Return the content-type for ``path``, falling back when unmapped."""
        mime = self.lookup(path)
        return mime if mime is not None else self.fallback

    def __repr__(self) -> str:
        return f"ContentTypeInferencer(source={self.source!r}, fallback={self.fallback!r})"


if __name__ == "__main__":
    import sys

    inferencer = ContentTypeInferencer()
    for arg in sys.argv[1:]:
        print(f"{arg}: {inferencer.infer(arg)}")
