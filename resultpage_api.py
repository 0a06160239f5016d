"""CLI entry-point to launch the resultpage read-only HTTP API."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import uvicorn

from api.db import SchemaAccess
from api.server import APIServerConfig, create_app
from core.logging_utils import configure_from_settings
from core.paths import resolve_working_dir
from core.settings import load_settings
from resultpage import __version__ as APP_VERSION

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765
DEFAULT_CORS = ["http://localhost", "http://127.0.0.1"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve paged rows of configured SQLite schemas.")
    parser.add_argument("--host", default=None, help="Bind host (default from settings.json)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default from settings.json)")
    parser.add_argument(
        "--cors",
        action="append",
        dest="cors",
        default=None,
        help="Allowed CORS origin (repeatable; replaces settings).",
    )
    parser.add_argument(
        "--working-dir",
        dest="working_dir",
        default=None,
        help="Working directory holding settings.json (default: RESULTPAGE_HOME or ~/.resultpage)",
    )
    return parser.parse_args(argv)


def resolve_api_settings(
    args: argparse.Namespace,
) -> Tuple[str, int, List[str], SchemaAccess, Dict[str, Any]]:
    working_dir = Path(args.working_dir).resolve() if args.working_dir else resolve_working_dir()
    settings = load_settings(working_dir)
    api_settings = settings.get("api") if isinstance(settings.get("api"), dict) else {}

    host = str(args.host or api_settings.get("host") or DEFAULT_HOST).strip() or DEFAULT_HOST
    port = args.port or api_settings.get("port") or DEFAULT_PORT
    try:
        port = int(port)
    except (TypeError, ValueError):
        port = DEFAULT_PORT

    if args.cors:
        cors = list(args.cors)
    else:
        cors = list(api_settings.get("cors_origins") or DEFAULT_CORS)

    data_access = SchemaAccess(working_dir=working_dir, settings=settings)
    return host, port, cors, data_access, settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    host, port, cors, data_access, settings = resolve_api_settings(args)
    logger = configure_from_settings(settings, data_access.working_dir)

    if not data_access.schema_ids():
        logger.warning("No schemas configured; add entries under \"schemas\" in settings.json.")

    config = APIServerConfig(
        data_access=data_access,
        cors_origins=cors,
        app_version=APP_VERSION,
    )
    app = create_app(config)

    print(f"API listening on http://{host}:{port}", flush=True)

    uvicorn_config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        access_log=False,
    )
    server = uvicorn.Server(uvicorn_config)
    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
