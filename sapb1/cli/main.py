from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any, Dict, List

from sapb1.config import ClientConfig
from sapb1.http import HttpClient, HttpLayerError, RequestBuilder
from sapb1.models import RequestPreviewOut, ResponseOut


def _print_json(obj: object) -> None:
    """Print JSON to stdout."""
    print(json.dumps(obj, indent=2, sort_keys=True, default=str))


def _parse_pairs(items: List[str], sep: str, what: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for item in items or []:
        if sep not in item:
            raise argparse.ArgumentTypeError(f"invalid {what} (expected NAME{sep}VALUE): {item!r}")
        name, value = item.split(sep, 1)
        out[name.strip()] = value.strip()
    return out


def _load_payload(args: argparse.Namespace) -> Any:
    if args.json_file:
        with open(args.json_file, "r", encoding="utf-8") as f:
            return json.load(f)
    if args.json is not None:
        return json.loads(args.json)
    return None


def _config(args: argparse.Namespace) -> ClientConfig:
    cfg = ClientConfig.from_env()
    if args.insecure:
        cfg = replace(cfg, verify_tls=False)
    if args.cafile:
        cfg = replace(cfg, cafile=args.cafile)
    if args.timeout is not None:
        cfg = replace(cfg, timeout_sec=args.timeout)
    return cfg


def _builder(client: HttpClient, args: argparse.Namespace) -> RequestBuilder:
    return (
        client.builder(args.url)
        .set_method(args.method.upper())
        .set_body(_load_payload(args))
        .set_files(args.file or [])
        .set_cookies(_parse_pairs(args.cookie, "=", "cookie"))
        .set_headers(_parse_pairs(args.header, ":", "header"))
    )


def cmd_preview(args: argparse.Namespace) -> int:
    """Build a request and print it without sending."""
    client = HttpClient(_config(args))
    try:
        d = _builder(client, args).build()
    except (OSError, ValueError, argparse.ArgumentTypeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    _print_json(RequestPreviewOut.from_descriptor(d).model_dump())
    return 0


def cmd_request(args: argparse.Namespace) -> int:
    """Send a request and print the parsed response.

    Security notes:
    - Treat server response as untrusted.

    """
    cfg = _config(args)
    logging.getLogger("sapb1").setLevel(cfg.log_level)
    client = HttpClient(cfg)
    try:
        r = client.execute(_builder(client, args))
    except (OSError, ValueError, argparse.ArgumentTypeError, HttpLayerError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    _print_json(ResponseOut.from_response(r).model_dump())
    return 2 if r.status_code >= 400 else 0


def _add_request_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("url", help="Request URL")
    p.add_argument("-X", "--method", default="GET", help="HTTP method (default GET)")
    p.add_argument("--json", default=None, help="JSON payload as a string")
    p.add_argument("--json-file", default=None, help="Read JSON payload from a file")
    p.add_argument(
        "--file", action="append", default=None, help="File to upload (repeatable, makes the request multipart)"
    )
    p.add_argument("--cookie", action="append", default=None, help="Cookie NAME=VALUE (repeatable)")
    p.add_argument("--header", action="append", default=None, help="Header 'Name: Value' (repeatable)")
    p.add_argument("--insecure", action="store_true", help="Disable TLS certificate verification")
    p.add_argument("--cafile", default=None, help="CA bundle for TLS verification")
    p.add_argument("--timeout", type=float, default=None, help="Timeout in seconds")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="sapb1", description="SAP B1 Service Layer HTTP CLI")
    p.add_argument("-v", "--verbose", action="store_true", help="Log to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("preview", help="Build a request and print headers without sending")
    _add_request_args(pp)
    pp.set_defaults(func=cmd_preview)

    rp = sub.add_parser("request", help="Send a request and print the parsed response")
    _add_request_args(rp)
    rp.set_defaults(func=cmd_request)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
