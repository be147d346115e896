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
Static file serving ASGI application.

Source of truth - rebuild from this description:

StaticFiles is an ASGI application serving files below one root directory.
It is mounted by a host router under any prefix; it sees the path left after
the prefix (``scope["path"]`` minus ``scope["root_path"]``).

Per request:
- Only HTTP scopes are handled; GET and HEAD are served, other methods get
  405 with an ``Allow`` header.
- The path goes through the pipeline (resolve, infer, assemble).
- A content-type preset by upstream middleware in ``scope["_content_type"]``
  is kept on success and never replaced by the inferred one.
- The outcome class name is recorded in ``scope["_outcome"]`` for the access
  log.
- The outcome is rendered by OutcomeRenderer: 200 / 403 / 404 / 500, error
  bodies empty unless ``error_rendering`` is on.

Constructor:
    StaticFiles(directory, **options)       # options = RouteConfig fields
    StaticFiles(config=RouteConfig(...))

create_app(config) returns StaticFiles wrapped in the middleware chain:
``errors`` always, ``logging`` when ``config.access_log`` is on.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import ConfigError, RouteConfig
from .middleware import middleware_chain
from .outcome import OUTCOME_SCOPE_KEY
from .pipeline import Pipeline, build_pipeline
from .rendering import OutcomeRenderer
from .types import ASGIApp, Receive, Scope, Send

__all__ = ["CONTENT_TYPE_SCOPE_KEY", "StaticFiles", "create_app", "request_path"]

# Scope key where upstream middleware may preset the response content-type.
CONTENT_TYPE_SCOPE_KEY = "_content_type"

ALLOWED_METHODS = ("GET", "HEAD")


def request_path(scope: Scope) -> str:
    """Return the path relative to the mount point."""
    path: str = scope.get("path", "/")
    root_path: str = scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        path = path[len(root_path):]
    return path or "/"


class StaticFiles:
    """
    ASGI application for serving static files.

    Example:
        app = StaticFiles("./public")
        app = StaticFiles("./docs", index_filename="readme.html", diagnostics=True)
        app = StaticFiles(config=load_route_config("genro-static.toml"))

    Attributes:
        config: The RouteConfig the app was built from.
        pipeline: Request pipeline (resolve, infer, assemble).
        renderer: Outcome to Response translation.
    """

    __slots__ = ("config", "pipeline", "renderer")

    def __init__(
        self,
        directory: str | Path | None = None,
        *,
        config: RouteConfig | None = None,
        **options: Any,
    ) -> None:
        """
        Initialize static file app.

        Args:
            directory: Root directory. Ignored when ``config`` is given.
            config: Complete RouteConfig.
            **options: Other RouteConfig fields (index_filename,
                fallback_mime, error_rendering, diagnostics, mime_source).

        Raises:
            ConfigError: If neither directory nor config is given, or the
                root is not a directory.
        """
        if config is None:
            if directory is None:
                raise ConfigError("StaticFiles needs a directory or a config")
            config = RouteConfig.from_dict({"root": directory, **options})
        elif options or directory is not None:
            raise ConfigError("Pass either config or directory/options, not both")

        if not config.root.is_dir():
            raise ConfigError(f"Directory does not exist: {config.root}")

        self.config = config
        self.pipeline: Pipeline = build_pipeline(config)
        self.renderer = OutcomeRenderer(status_text=config.error_rendering)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Handle one ASGI request."""
        if scope["type"] != "http":
            return

        method = scope.get("method", "GET")
        if method not in ALLOWED_METHODS:
            response = self.renderer.error(405, headers={"allow": ", ".join(ALLOWED_METHODS)})
            await response(scope, receive, send)
            return

        outcome = await self.pipeline.serve(
            request_path(scope), content_type=scope.get(CONTENT_TYPE_SCOPE_KEY)
        )
        scope[OUTCOME_SCOPE_KEY] = type(outcome).__name__
        response = self.renderer.render(outcome, head=(method == "HEAD"))
        await response(scope, receive, send)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"StaticFiles(directory={str(self.config.root)!r}, index={self.config.index_filename!r})"


def create_app(config: RouteConfig) -> ASGIApp:
    """Build the full application for ``config``.

    Returns:
        StaticFiles wrapped in ErrorMiddleware, and in LoggingMiddleware when
        ``config.access_log`` is on.
    """
    return middleware_chain({"logging": config.access_log}, StaticFiles(config=config))


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Serve static files")
    parser.add_argument("directory", help="Directory to serve")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--index", default="index.html", help="Index file")
    args = parser.parse_args()

    app = create_app(RouteConfig(root=Path(args.directory), index_filename=args.index))

    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=args.port)
