# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""StaticRouter - the static pipeline as a genro-routes router.

Lets a genro-routes routing tree mount a static root like any other router.
The router owns a single entry, ``serve``; ``node(path)`` does no I/O and
binds the path segments as the entry's positional arguments. Awaiting the
node runs the pipeline and yields the ResponseOutcome.

Usage:
    router = StaticRouter(RouteConfig(root=Path("./public")), name="assets")

    router_node = router.node("css/site.css?v=3")
    router_node.path                      # "/css/site.css"
    router_node.metadata                  # {"root": "/srv/public"}
    outcome = await router_node()         # Success(...) / NotFound() / ...
    outcome = await router_node(v="3")    # keyword args (query) are ignored

    router.content_type("docs/")          # "text/html" (index substituted)

Segments are kept verbatim, trailing separator included, so ``node("sub/")``
serves ``/sub/`` with index substitution and ``node("a.css/")`` is NotFound,
exactly as the ASGI app does.

When the root directory does not exist ``node()`` returns a RouterNode with
``error == "not_found"``; calling it raises the mapped not-found exception.
Paths are not listed: ``nodes()`` describes the router only.
"""

from __future__ import annotations

from typing import Any

from genro_routes import RouterInterface, RouterNode
from genro_routes.plugins import MethodEntry

from ..config import RouteConfig
from ..exceptions import PathForbidden
from ..outcome import ResponseOutcome
from ..pipeline import Pipeline, build_pipeline
from ..resolver import normalize_path

__all__ = ["StaticRouter"]


class StaticRouter(RouterInterface):
    """Router serving a static root through the pipeline.

    Attributes:
        name: Router name for introspection (optional).
        config: RouteConfig the pipeline was built from.
        default_entry: Name of the single entry every node resolves to.
    """

    __slots__ = ("config", "name", "default_entry", "_pipeline", "_entries")

    def __init__(self, config: RouteConfig, name: str | None = None) -> None:
        self.config = config
        self.name = name
        self.default_entry = "serve"
        self._pipeline: Pipeline = build_pipeline(config)
        self._entries: dict[str, MethodEntry] = {
            "serve": MethodEntry(
                name="serve",
                func=self._serve,
                router=self,
                plugins=[],
                metadata={"meta": {"root": str(config.root)}},
            )
        }

    async def _serve(self, *segments: str, **query: Any) -> ResponseOutcome:
        """Serve the file named by ``segments`` below the root."""
        return await self._pipeline.serve("/" + "/".join(segments))

    def node(
        self,
        path: str,
        errors: dict[str, type[Exception]] | None = None,
        **kwargs: Any,
    ) -> RouterNode:
        """Return the RouterNode serving ``path``.

        Args:
            path: Relative path, optionally with query string (dropped).
            errors: Error code to exception class mapping for the node.

        Returns:
            RouterNode bound to the ``serve`` entry. Its error is
            "not_found" if the root directory does not exist.
        """
        path = path.split("?", 1)[0]
        relative = path.lstrip("/")
        router_node = RouterNode(
            self,
            errors,
            entry_name=self.default_entry,
            path="/" + relative,
            partial=relative.split("/") if relative else [],
        )
        if not self.config.root.is_dir():
            router_node.error = "not_found"
        return router_node

    def content_type(self, path: str) -> str:
        """Return the content-type a request for ``path`` would be served with.

        Directory-like paths are looked up as their index file. Uses the
        non-logging lookup, so diagnostics only report actual requests.
        """
        try:
            segments, directory_like = normalize_path(path.split("?", 1)[0])
        except PathForbidden:
            segments, directory_like = (), False
        if directory_like:
            segments = (*segments, self.config.index_filename)
        inferencer = self._pipeline.inferencer
        mime = inferencer.lookup("/".join(segments))
        return mime if mime is not None else inferencer.fallback

    def _on_attached_to_parent(self, parent: Any) -> None:
        """Called when attached to a parent router. No-op for static router."""
        pass

    def nodes(
        self,
        basepath: str | None = None,
        lazy: bool = False,
        pattern: str | None = None,
        forbidden: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Describe the router. Files are not enumerated.

        Returns:
            Dict with name, description and router, or {} if the root
            directory does not exist.
        """
        if not self.config.root.is_dir():
            return {}
        return {
            "name": self.name,
            "description": f"Static files from {self.config.root}",
            "router": self,
        }
