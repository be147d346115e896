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

"""genro-static - static asset serving for ASGI routing trees.

Main components:
    StaticFiles: ASGI app serving one root directory under any mount prefix
    StaticRouter: the same pipeline as a genro-routes router
    StaticPipeline: resolve -> infer content-type -> assemble outcome
    RouteConfig: immutable configuration (root, index, fallback MIME, ...)

Outcomes:
    Success, NotFound, Forbidden, IoError

Middleware:
    ErrorMiddleware: unexpected exceptions -> generic 500
    LoggingMiddleware: access log
    ContentTypeMiddleware: fill a missing Content-Type from the path

Usage:
    from genro_static import StaticFiles

    app = StaticFiles("./public", diagnostics=True)
    # uvicorn module:app, or mount under a prefix in the host router
"""

__version__ = "0.1.0"

from .assembler import ResponseAssembler
from .config import ConfigError, RouteConfig, load_config, load_route_config
from .diagnostics import DiagnosticInferencer, DiagnosticPipeline
from .exceptions import PathForbidden, PathNotFound, StaticError
from .middleware import BaseMiddleware, middleware_chain
from .middleware.contenttype import ContentTypeMiddleware
from .middleware.errors import ErrorMiddleware
from .middleware.logging import LoggingMiddleware
from .mime import (
    DEFAULT_FALLBACK_MIME,
    MIME_TYPES,
    ContentTypeInferencer,
    MimetypesSource,
    TableMimeSource,
    extension_of,
)
from .outcome import Forbidden, IoError, NotFound, ResponseOutcome, Success
from .pipeline import StaticPipeline, build_pipeline
from .rendering import OutcomeRenderer
from .resolver import ResolvedPath, Resolver
from .response import Response
from .routers import StaticRouter
from .static import StaticFiles, create_app
from .storage import LocalStorage, LocalStorageNode, StorageNode
from .types import ASGIApp, Message, Receive, Scope, Send

__all__ = [
    # Application
    "StaticFiles",
    "StaticRouter",
    "create_app",
    # Configuration
    "ConfigError",
    "RouteConfig",
    "load_config",
    "load_route_config",
    # Pipeline
    "StaticPipeline",
    "build_pipeline",
    "Resolver",
    "ResolvedPath",
    "ResponseAssembler",
    "DiagnosticInferencer",
    "DiagnosticPipeline",
    # Content types
    "DEFAULT_FALLBACK_MIME",
    "MIME_TYPES",
    "ContentTypeInferencer",
    "MimetypesSource",
    "TableMimeSource",
    "extension_of",
    # Outcomes
    "ResponseOutcome",
    "Success",
    "NotFound",
    "Forbidden",
    "IoError",
    "OutcomeRenderer",
    "Response",
    # Exceptions
    "StaticError",
    "PathForbidden",
    "PathNotFound",
    # Middleware
    "BaseMiddleware",
    "middleware_chain",
    "ContentTypeMiddleware",
    "ErrorMiddleware",
    "LoggingMiddleware",
    # Storage
    "LocalStorage",
    "LocalStorageNode",
    "StorageNode",
    # ASGI types
    "ASGIApp",
    "Message",
    "Receive",
    "Scope",
    "Send",
]
