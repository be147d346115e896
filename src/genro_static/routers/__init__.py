# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Router implementations for genro-static.

Exports:
    StaticRouter: genro-routes router serving a static root.
"""

from .static_router import StaticRouter

__all__ = ["StaticRouter"]
