"""Entry point for ``python -m codereview`` and the ``codereview`` console script."""

import argparse
import asyncio
import json
from dataclasses import asdict
from typing import Optional, Sequence

import uvicorn
from urllib3.util.url import parse_url

from codereview.core import get_config


def serve(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    url = parse_url(get_config().APP.URL)
    host = host or url.host or "localhost"
    port = port or url.port or 8080

    print(f"Starting CodeReview service at http://{host}:{port}...")
    print("Press Ctrl+C to stop.")
    uvicorn.run("codereview.app:create_app", factory=True, host=host, port=port, reload=reload)


async def reconcile() -> dict:
    """Rebuild the reviewer arrays of cohorts and projects from assignment records."""
    from codereview.container import Container
    from codereview.db import close_db, initialize_db

    await initialize_db()
    try:
        report = await Container().assignment_service.reconcile()
    finally:
        await close_db()
    return asdict(report)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="codereview", description="CodeReview platform backend")
    commands = parser.add_subparsers(dest="command")

    serve_parser = commands.add_parser("serve", help="Run the HTTP API (default)")
    serve_parser.add_argument("--host", default=None, help="Bind host (defaults to APP.URL)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (defaults to APP.URL)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    commands.add_parser("reconcile", help="Repair reviewer lists from assignment records")

    args = parser.parse_args(argv)
    if args.command == "reconcile":
        print(json.dumps(asyncio.run(reconcile())))
        return
    serve(getattr(args, "host", None), getattr(args, "port", None), getattr(args, "reload", False))


if __name__ == "__main__":
    main()
