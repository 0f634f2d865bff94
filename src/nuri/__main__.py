"""Command-line front end: ``python -m nuri URI...`` prints the components of each URI."""

import argparse
import json
import logging
import sys

from typing import Any, Sequence

from . import __version__
from .uri import Uri, UriError, parse_uri

LOGGER = logging.getLogger("nuri")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nuri",
        description="Split URIs into scheme, authority, path, query and fragment.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging verbosity",
    )
    parser.add_argument("--json", action="store_true", help="Emit one JSON object per URI")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("uris", nargs="+", metavar="URI", help="URI to parse")
    return parser


def _describe(uri: Uri) -> dict[str, Any]:
    return {
        "scheme": uri.scheme,
        "has_authority": uri.has_authority,
        "authority": uri.authority,
        "username": uri.username,
        "password": uri.password,
        "host": uri.host,
        "hostname": uri.hostname,
        "port": uri.port,
        "path": uri.path,
        "query": uri.query,
        "fragment": uri.fragment,
        "query_params": [list(param) for param in uri.query_params],
    }


def _print_text(description: dict[str, Any]) -> None:
    for key, value in description.items():
        if key == "query_params":
            for name, param_value in value:
                print(f"  param: {name}={param_value}")
            continue
        print(f"  {key}: {value}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    status: int = 0
    for raw in args.uris:
        try:
            uri: Uri = parse_uri(raw)
        except UriError as exc:
            print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
            status = 2
            continue
        description: dict[str, Any] = _describe(uri)
        if args.json:
            print(json.dumps({"uri": raw, **description}, ensure_ascii=False))
        else:
            print(raw)
            _print_text(description)
    LOGGER.debug("parsed %d URI(s), exit status %d", len(args.uris), status)
    return status


if __name__ == "__main__":
    sys.exit(main())
