# src/faleproxy/cli.py
from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from faleproxy.controllers.proxy_controller import ProxyController
from faleproxy.core.managers.config_manager import config_manager
from faleproxy.core.utils.configure_logging import configure_logger
from faleproxy.errors import FaleproxyError

logger = logging.getLogger(__name__)

USAGE = """
Usage:
  faleproxy serve [--host HOST] [--port PORT] [--debug] [--target-word W] [--substitute-word W]
  faleproxy fetch URL [URL ...] [--out DIR] [--target-word W] [--substitute-word W]
"""


def slugify_url(url: str) -> str:
    """'https://www.yale.edu/about/' -> 'www.yale.edu_about'"""
    slug = re.sub(r"^[a-z][a-z0-9+.-]*://", "", url.strip(), flags=re.IGNORECASE)
    slug = re.sub(r"[^A-Za-z0-9._-]+", "_", slug).strip("_")
    return slug or "index"


def handle_fetch(urls: List[str], out_dir: Optional[Path], controller: Optional[ProxyController] = None) -> int:
    """
    Fetches and transforms every URL on its own. Links are not followed.
    Writes <slug>.html files to out_dir, or prints the JSON responses.
    """
    controller = controller or ProxyController()
    responses = []
    failures = 0

    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    iterator = tqdm(urls, desc="Proxying", unit="page", leave=False, disable=len(urls) < 2)
    for url in iterator:
        try:
            result = controller.fetch_and_transform(url)
        except FaleproxyError as e:
            failures += 1
            logger.error("❌ %s: %s", url, e.detail)
            continue

        if out_dir is not None:
            target = out_dir / f"{slugify_url(url)}.html"
            target.write_text(result.transformed_html, encoding="utf-8")
            logger.info("✅ %s -> %s", url, target)
        else:
            responses.append(result.to_response())

    if out_dir is None and responses:
        payload = responses[0] if len(urls) == 1 else responses
        print(json.dumps(payload, indent=2, ensure_ascii=False))

    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="faleproxy", description="Fetch pages and swap one word for another.")
    sub = parser.add_subparsers(dest="command")

    words = argparse.ArgumentParser(add_help=False)
    words.add_argument("--target-word", default=None, help="Word to replace (default: substitution.target_word)")
    words.add_argument("--substitute-word", default=None, help="Replacement (default: substitution.substitute_word)")

    serve_p = sub.add_parser("serve", parents=[words], help="Run the proxy web server")
    serve_p.add_argument("--host", type=str, default=None)
    serve_p.add_argument("--port", type=int, default=None)
    serve_p.add_argument("--debug", action="store_true")

    fetch_p = sub.add_parser("fetch", parents=[words], help="Proxy one or more pages from the command line")
    fetch_p.add_argument("urls", nargs="+", metavar="URL")
    fetch_p.add_argument("--out", type=Path, default=None, help="Directory to write transformed pages to")
    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Maps command line flags onto dotted settings keys. Unset flags stay None."""
    return {
        "server.host": getattr(args, "host", None),
        "server.port": getattr(args, "port", None),
        "substitution.target_word": getattr(args, "target_word", None),
        "substitution.substitute_word": getattr(args, "substitute_word", None),
    }


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config_manager.apply_overrides(config_overrides(args))

    configure_logger(
        config_manager.get_nested("debug.level", "INFO"),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers"),
    )

    if args.command == "serve":
        # Imported lazily so 'fetch' does not pull in Flask
        from faleproxy.server.app import serve
        serve(args.debug)
        return 0

    if args.command == "fetch":
        return handle_fetch(args.urls, args.out)

    print(USAGE)
    return 1


if __name__ == "__main__":
    sys.exit(main())
