# upsc_portal/cli.py
"""
Command-line entry points for the prep portal.

- ``serve``: run the FastAPI app under uvicorn
- ``search``: query the local catalog, or a running server with ``--url``
- ``views``: read (or ``--record``) a view count on a running server
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from loguru import logger

from .catalog import load_catalog
from .client import PortalClient
from .config import LOG_LEVEL, PORTAL_URL, SERVER_HOST, SERVER_PORT
from .search import search_catalog


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _print_results(results) -> None:
    if not results:
        print("No results found")
        return
    for i, r in enumerate(results, 1):
        print(f"{i:>2}. [{r.id}] {r.title}  ({r.context_label})")


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("upsc_portal.api:app", host=args.host, port=args.port, reload=False)
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    if args.url:
        with PortalClient(args.url) as client:
            results = client.search(args.query)
    else:
        results = search_catalog(load_catalog(), args.query)
    _print_results(results)
    return 0


def cmd_views(args: argparse.Namespace) -> int:
    with PortalClient(args.url) as client:
        if args.record:
            count = client.record_view(args.item_id)
        else:
            count = client.get_view_count(args.item_id)
    print(f"{args.item_id}: {count} views")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="upsc-portal")
    ap.add_argument("--log-level", default=LOG_LEVEL, help=f"loguru level (default {LOG_LEVEL})")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("--host", default=SERVER_HOST)
    p.add_argument("--port", type=int, default=SERVER_PORT)
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser("search", help="search topics and previous-year papers")
    p.add_argument("query")
    p.add_argument("--url", default=None, help="query a running server instead of the local catalog")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("views", help="show or record the view count of an item")
    p.add_argument("item_id")
    p.add_argument("--record", action="store_true", help="increment before printing")
    p.add_argument("--url", default=PORTAL_URL)
    p.set_defaults(func=cmd_views)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    try:
        return args.func(args)
    except Exception as e:
        logger.error("{} failed: {}", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
