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
genro-static CLI entry point.

Usage:
    genro-static serve ./public                    # Serve a directory
    genro-static serve ./public --port 9000 --diagnostics
    genro-static serve --config genro-static.toml  # Options from [static]

Command-line options override the config file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from .config import ConfigError, RouteConfig, find_config_file, load_route_config


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the CLI."""
    from . import __version__

    parser = argparse.ArgumentParser(prog="genro-static", description="Serve static files over ASGI")
    parser.add_argument("--version", "-v", action="version", version=f"genro-static {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Serve a directory")
    serve.add_argument("directory", nargs="?", help="Directory to serve (default: config root)")
    serve.add_argument("--config", help="TOML config file with a [static] table")
    serve.add_argument("--host", default="127.0.0.1", help="Server host (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Server port (default: 8000)")
    serve.add_argument("--index", dest="index_filename", help="Index file (default: index.html)")
    serve.add_argument("--fallback-mime", dest="fallback_mime", help="Content-type for unknown extensions")
    serve.add_argument("--mime-source", dest="mime_source", choices=("table", "mimetypes"))
    serve.add_argument(
        "--error-rendering", dest="error_rendering", action="store_true", default=None,
        help="Human-readable status text in error bodies",
    )
    serve.add_argument(
        "--diagnostics", action="store_true", default=None,
        help="Log unknown extensions and I/O errors",
    )
    serve.add_argument(
        "--access-log", dest="access_log", action="store_true", default=None,
        help="Log every request",
    )
    serve.add_argument("--log-level", default="info", help="uvicorn log level (default: info)")
    return parser


def resolve_config(args: argparse.Namespace) -> RouteConfig:
    """Merge config file and command-line options into a RouteConfig.

    Raises:
        ConfigError: if no root is given or options are invalid.
    """
    overrides: dict[str, Any] = {
        "index_filename": args.index_filename,
        "fallback_mime": args.fallback_mime,
        "mime_source": args.mime_source,
        "error_rendering": args.error_rendering,
        "diagnostics": args.diagnostics,
        "access_log": args.access_log,
    }
    if args.directory:
        overrides["root"] = Path(args.directory).resolve()

    config_path = Path(args.config) if args.config else None
    if config_path is None and not args.directory:
        config_path = find_config_file()

    if config_path is not None:
        return load_route_config(config_path, **overrides)
    if not args.directory:
        raise ConfigError("No directory given and no configuration file found")
    return RouteConfig.from_dict({k: v for k, v in overrides.items() if v is not None})


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the ASGI server."""
    try:
        config = resolve_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.root.is_dir():
        print(f"Error: '{config.root}' is not a directory.", file=sys.stderr)
        return 1

    from .static import create_app

    app = create_app(config)

    print("genro-static starting...", flush=True)
    print(f"Root: {config.root}", flush=True)
    print(f"Server: http://{args.host}:{args.port}", flush=True)
    print(flush=True)

    import uvicorn

    try:
        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    except KeyboardInterrupt:
        print("\nShutdown.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return cmd_serve(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
