# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Middleware package - optional ASGI layers around StaticFiles."""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

MIDDLEWARE_REGISTRY: dict[str, type["BaseMiddleware"]] = {}


class BaseMiddleware(ABC):
    """Base class for all middleware. Subclasses auto-register via __init_subclass__.

    Class attributes:
        middleware_name: Registry key (default: class name).
        middleware_order: Order in chain (lower = earlier). Ranges:
            100: Core (errors)
            200: Logging
            500-800: Response shaping (contenttype)
        middleware_default: Default on/off state. Default: False.
    """

    middleware_name: str = ""
    middleware_order: int = 500
    middleware_default: bool = False

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp, **kwargs: Any) -> None:
        """Initialize middleware with wrapped app.

        Args:
            app: The ASGI app to wrap (next in chain).
            **kwargs: Middleware-specific options.
        """
        self.app = app

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        name = cls.middleware_name or cls.__name__
        if name in MIDDLEWARE_REGISTRY:
            raise ValueError(f"Middleware name '{name}' already registered")
        cls.middleware_name = name
        MIDDLEWARE_REGISTRY[name] = cls

    @abstractmethod
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


def _autodiscover() -> None:
    """Import all middleware modules in this package to trigger registration."""
    package_dir = Path(__file__).parent
    for py_file in package_dir.glob("*.py"):
        if py_file.name.startswith("_"):
            continue
        importlib.import_module(f".{py_file.stem}", __package__)


def middleware_chain(
    enabled: Mapping[str, Any] | str | list[str] | None,
    app: ASGIApp,
    options: Mapping[str, Mapping[str, Any]] | None = None,
) -> ASGIApp:
    """Wrap ``app`` in the enabled middleware, ordered by middleware_order.

    Args:
        enabled: {name: on/off}, a comma-separated string or a list of names.
            Middleware not mentioned use their middleware_default.
        app: The innermost ASGI app (usually StaticFiles).
        options: {name: {option: value}} passed to each middleware.

    Returns:
        Wrapped ASGI app; the lowest order is outermost.

    Raises:
        ValueError: if a name is not registered.
    """
    config: dict[str, bool] = {}
    if isinstance(enabled, str):
        config = {name.strip(): True for name in enabled.split(",") if name.strip()}
    elif isinstance(enabled, Mapping):
        config = {name: _parse_enabled(value) for name, value in enabled.items()}
    elif enabled:
        config = {name: True for name in enabled}

    unknown = sorted(set(config) - set(MIDDLEWARE_REGISTRY))
    if unknown:
        raise ValueError(f"Unknown middleware: {', '.join(unknown)}")

    chain = [
        cls
        for name, cls in MIDDLEWARE_REGISTRY.items()
        if config.get(name, cls.middleware_default)
    ]
    chain.sort(key=lambda cls: cls.middleware_order)

    options = options or {}
    for cls in reversed(chain):
        app = cls(app, **dict(options.get(cls.middleware_name, {})))
    return app


def _parse_enabled(value: Any) -> bool:
    """Parse on/off/true/false value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("on", "true", "yes", "1")
    return bool(value)


_autodiscover()
globals().update(MIDDLEWARE_REGISTRY)

__all__ = [
    "BaseMiddleware",
    "MIDDLEWARE_REGISTRY",
    "middleware_chain",
    *MIDDLEWARE_REGISTRY.keys(),
]
