#!/usr/bin/env python3
"""mermaidgen CLI - turn Mermaid code into mermaid.live view URLs."""

import argparse
import json
import logging
import os
import sys
from typing import Iterable, Optional

from .browser import view_in_browser
from .errors import MermaidGenError
from .export import LIVE_URL, decode_live_url, live_url

log = logging.getLogger(__name__)


def _json_out(data) -> int:
    print(json.dumps(data))
    return 0 if data.get("status") != "error" else 1


def _read_code(args) -> str:
    """Mermaid code from FILE, --text or stdin."""
    if args.file and args.text is not None:
        raise MermaidGenError("--text cannot be combined with a file")
    if args.text is not None:
        return args.text
    if args.file:
        try:
            with open(args.file, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise MermaidGenError(f"Cannot read {args.file}: {e}") from e
    if sys.stdin.isatty():
        raise MermaidGenError("No input: pass a file, --text or pipe Mermaid code into stdin")
    try:
        return sys.stdin.read()
    except UnicodeDecodeError as e:
        raise MermaidGenError(f"Cannot read stdin: {e}") from e


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_url(args):
    url = live_url(_read_code(args), base_url=args.base_url)
    return _json_out({"status": "ok", "url": url})


def cmd_open(args):
    url = live_url(_read_code(args), base_url=args.base_url)
    try:
        view_in_browser(url)
    except OSError as e:
        raise MermaidGenError(f"Cannot start browser: {e}") from e
    return _json_out({"status": "opened", "url": url})


def cmd_decode(args):
    state = decode_live_url(args.url)
    return _json_out({"status": "ok", "code": state["code"], "mermaid": state.get("mermaid", {})})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mermaidgen", description="Mermaid live URL helper")
    parser.add_argument("--base-url", default=os.environ.get("MERMAIDGEN_LIVE_URL", LIVE_URL),
                        help="Viewer URL ending in #pako: (env: MERMAIDGEN_LIVE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("url", help="Print the view URL for Mermaid code")
    p.add_argument("file", nargs="?", help="File with Mermaid code (default: stdin)")
    p.add_argument("--text", help="Mermaid code given inline")
    p.set_defaults(func=cmd_url)

    p = sub.add_parser("open", help="Open Mermaid code in the browser")
    p.add_argument("file", nargs="?", help="File with Mermaid code (default: stdin)")
    p.add_argument("--text", help="Mermaid code given inline")
    p.set_defaults(func=cmd_open)

    p = sub.add_parser("decode", help="Print the Mermaid code inside a view URL")
    p.add_argument("url", help="mermaid.live view URL")
    p.set_defaults(func=cmd_decode)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except MermaidGenError as e:
        log.debug("Command %s failed", args.command, exc_info=True)
        return _json_out({"status": "error", "error": str(e)})


if __name__ == "__main__":
    raise SystemExit(main())
